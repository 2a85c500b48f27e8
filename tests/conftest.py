"""
Shared fixtures: an app wired to in-memory collections, and a TestClient for it.
"""

import os

import pytest
from fastapi.testclient import TestClient

# main builds a module-level app at import time from the environment, before
# any fixture runs. The client fixture passes its own Settings; this only
# quiets that import-time app. setdefault keeps an explicit LOG_LEVEL.
os.environ.setdefault("LOG_LEVEL", "WARNING")

from config import Settings  # noqa: E402
from database import Storage  # noqa: E402
from main import create_app  # noqa: E402
from tests.support import FakeCollection  # noqa: E402


@pytest.fixture
def storage():
    return Storage(users=FakeCollection(), groups=FakeCollection())


@pytest.fixture
def client(storage):
    app = create_app(settings=Settings(log_level="WARNING"), storage=storage)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_data():
    return {"nombre": "Ana", "apellido": "Gómez", "telefono": "3001234567", "edad": 29}
