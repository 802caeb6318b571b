import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure backend/ is importable as the top-level "miary" package even when pytest runs from repo root
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# Run the service in test mode *before* importing any miary modules
os.environ.setdefault("ENV", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("DEFAULT_TIMEZONE", "Europe/Berlin")

from miary.config import get_settings  # noqa: E402
from miary.main import app  # noqa: E402


@pytest.fixture(scope="function")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def fresh_settings():
    """Drop the cached Settings so env changes made by a test take effect."""
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()
