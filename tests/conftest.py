import sys
from pathlib import Path

# Ensure src/ packages are importable without an install
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import matplotlib

matplotlib.use("Agg")

import pytest

DATA_DIR = ROOT / "data"


@pytest.fixture
def security_trace() -> Path:
    return DATA_DIR / "security_events.csv"


@pytest.fixture
def iot_trace() -> Path:
    return DATA_DIR / "iot_events.csv"


@pytest.fixture
def allow_file() -> Path:
    return DATA_DIR / "allow_list.txt"
