import sys

from mcp.server.fastmcp import FastMCP

# All tools we want to expose via the MCP server
from model_shims.registry import get_all_discovery_tools, info

# create an MCP server
mcp = FastMCP("model-shims")

# Add model discovery tools
for tool_func in get_all_discovery_tools():
    mcp.add_tool(tool_func)

mcp.add_tool(info, name="model_info")


def main():
    mcp.run()


if __name__ == "__main__":
    # --check only builds the server, used by the test-suite
    if "--check" in sys.argv:
        print("✓ model-shims server initialized successfully")
    else:
        main()
