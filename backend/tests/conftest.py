"""
DoctorWeb Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── data_dir:     Temporary content directory seeded with empty collections
    ├── clock:        Controllable "now" for store timestamps
    ├── store:        DocumentStore on data_dir using clock
    ├── service:      ContentService over store
    └── test_client:  HTTPX AsyncClient bound to an app serving data_dir
"""

import json
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Override settings for testing BEFORE any app imports
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="doctorweb_test_")
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.models.collection import COLLECTIONS
from app.services.content_service import ContentService
from app.services.document_store import DocumentStore


class FakeClock:
    """Returns a fixed UTC instant until advanced."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def write_collection(data_dir: Path, name: str, content) -> None:
    """Replace a collection file with `content` (serialized as JSON)."""
    (data_dir / f"{name}.json").write_text(json.dumps(content), encoding="utf-8")


def read_collection(data_dir: Path, name: str):
    return json.loads((data_dir / f"{name}.json").read_text(encoding="utf-8"))


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """
    A fresh content directory holding an empty unit for every collection.

    Lists start as [], singletons as {}.
    """
    directory = tmp_path / "data"
    directory.mkdir()
    for spec in COLLECTIONS.values():
        write_collection(directory, spec.name, spec.empty_unit())
    return directory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=timezone.utc))


@pytest.fixture
def store(data_dir, clock) -> DocumentStore:
    return DocumentStore(str(data_dir), clock=clock)


@pytest.fixture
def service(store) -> ContentService:
    return ContentService(store)


@pytest.fixture
def app(data_dir):
    from app.main import create_app

    return create_app(data_dir=str(data_dir))


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Uses ASGITransport to route requests directly to the app (no server,
    no lifespan: data_dir is already seeded).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
