"""
Test configuration and fixtures.

Every test gets its own temporary SQLite database with the tables
created, plus an application wired to it.
"""

import os
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing the app.
os.environ.setdefault("LOG_LEVEL", "WARNING")

from chat_api.app.core.config import Settings  # noqa: E402
from chat_api.app.core.db import init_db  # noqa: E402
from chat_api.app.core.store import DocumentCollection, StoreError, message_collection, user_collection  # noqa: E402
from chat_api.app.main import create_app  # noqa: E402


class FailingCollection(DocumentCollection):
    """A collection whose every operation fails like an unreachable database."""

    async def find_one(self, filter):
        raise StoreError("Database error")

    async def find(self, filter=None, sort=None):
        raise StoreError("Database error")

    async def create(self, document):
        raise StoreError("Database error")

    async def find_one_and_update(self, filter, updates):
        raise StoreError("Database error")

    async def find_one_and_delete(self, filter):
        raise StoreError("Database error")


class RecordingNotifier:
    """Stands in for ``Notifier`` and keeps every emitted event."""

    def __init__(self) -> None:
        self.events: List[Dict[str, Any]] = []

    async def emit(self, event: str, payload: Dict[str, Any]) -> None:
        self.events.append({"event": event, "payload": payload})


@pytest.fixture()
def database_path(tmp_path):
    path = str(tmp_path / "chat.db")
    init_db(path)
    return path


@pytest.fixture()
def users(database_path):
    return user_collection(database_path)


@pytest.fixture()
def messages(database_path):
    return message_collection(database_path)


@pytest.fixture()
def failing_collection():
    return FailingCollection()


@pytest.fixture()
def recording_notifier():
    return RecordingNotifier()


@pytest.fixture()
def settings(database_path):
    return Settings(database_url=database_path, log_level="WARNING")


@pytest.fixture()
def app(settings):
    """Create and configure a new FastAPI app instance for each test."""
    return create_app(settings)


@pytest.fixture()
def client(app):
    """A test client for the FastAPI app, with startup/shutdown run."""
    with TestClient(app) as test_client:
        yield test_client
