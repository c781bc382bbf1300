import os
import sys

import pytest
from fastapi.testclient import TestClient

# Add the parent directory to sys.path so we can import main
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import Settings  # noqa: E402
from main import create_app  # noqa: E402


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir, tmp_path):
    return Settings(upload_dir=upload_dir, log_dir=str(tmp_path / "logs"))


@pytest.fixture
def client(settings):
    """Test client with the lifespan run, so storage is initialized."""
    with TestClient(create_app(settings)) as client:
        yield client

