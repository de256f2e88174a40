"""
Where model-shims keeps its files.

Only the operation history lives here for now (see
``model_shims.infrastructure.logging``). Point ``MODEL_SHIMS_DATA_DIR`` at
another directory to keep the history per project, e.g.

    export MODEL_SHIMS_DATA_DIR="~/experiments/iris/.model_shims"
"""

import os
from pathlib import Path


DATA_DIR_ENV = "MODEL_SHIMS_DATA_DIR"
HISTORY_FILENAME = "history.log"


def get_data_root() -> Path:
    """Directory for model-shims files, created if missing (default ``~/.model_shims``)."""
    override = os.getenv(DATA_DIR_ENV)
    root = Path(override).expanduser() if override else Path.home() / ".model_shims"
    root.mkdir(parents=True, exist_ok=True)
    return root


DATA_ROOT = get_data_root()
LOG_PATH = DATA_ROOT / HISTORY_FILENAME
