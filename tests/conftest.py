import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest

# keep the history log out of the user's home directory
_LOG_DIR = tempfile.mkdtemp(prefix="model_shims_test_")
os.environ["MODEL_SHIMS_DATA_DIR"] = _LOG_DIR

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


@pytest.fixture(scope="session", autouse=True)
def session_data_dir():
    try:
        yield Path(_LOG_DIR)
    finally:
        shutil.rmtree(_LOG_DIR, ignore_errors=True)


@pytest.fixture
def iris():
    from sklearn.datasets import load_iris

    data = load_iris(as_frame=True)
    X = data.data
    y = data.target_names[data.target]
    return X, y


@pytest.fixture
def regression_data():
    from sklearn.datasets import make_regression

    X, y = make_regression(n_samples=60, n_features=4, noise=0.1, random_state=42)
    return X, y
