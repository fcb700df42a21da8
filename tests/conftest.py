import sys
from pathlib import Path

# Ensure the src directory is on sys.path for test imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


import pytest

from packeteer.storage import DNSStore


@pytest.fixture
def store(tmp_path: Path):
    """Return an open DNS store backed by a temporary file."""
    db = DNSStore.open(tmp_path / "test.duckdb")
    yield db
    db.close()
