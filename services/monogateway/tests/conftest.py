# The sandbox modules are flat (run from services/monogateway); make them
# importable and point them at a throwaway database before first import.
import os
import sys
import tempfile
from pathlib import Path

import pytest

SERVICE_DIR = Path(__file__).resolve().parent.parent
if str(SERVICE_DIR) not in sys.path:
    sys.path.insert(0, str(SERVICE_DIR))

_db_dir = tempfile.mkdtemp(prefix="monogateway-")
os.environ.setdefault("MONOGATEWAY_DATABASE_URL", f"sqlite:///{_db_dir}/sandbox.db")
os.environ.setdefault("MONOGATEWAY_TOKEN", "test-token")

TOKEN = os.environ["MONOGATEWAY_TOKEN"]


@pytest.fixture
def gateway():
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def auth():
    return {"X-Token": TOKEN}
