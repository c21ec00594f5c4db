"""Pytest configuration and fixtures."""

import asyncio
import os
from datetime import datetime, timezone
from typing import Dict, List, Tuple
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from mongomock import MongoClient

JWT_SECRET = "test-jwt-secret-key-for-carelog-tests"

# Set test environment variables before importing the package
os.environ["MONGO_USER"] = "test_user"
os.environ["MONGO_PASS"] = "test_pass"
os.environ["MONGO_HOST"] = "localhost"
os.environ["MONGO_PORT"] = "27017"
os.environ["MONGO_DB"] = "test_db"
os.environ["JWT_SECRET_KEY"] = JWT_SECRET
os.environ["STORAGE_PUBLIC_BASE_URL"] = "http://testserver"
os.environ["PET_PHOTOS_BUCKET"] = "pet-photos"

from carelog.app import CareLogApp  # noqa: E402
from carelog.auth import MongoAuth  # noqa: E402
from carelog.errors import StoreError  # noqa: E402
from carelog.store import MongoStore  # noqa: E402

OWNER_USERNAME = "owner"
OWNER_PASSWORD = "secret123"


class RecordingStore(MongoStore):
    """MongoStore that records selects and can hold or fail them on demand."""

    def __init__(self, db, **kwargs):
        super().__init__(db, **kwargs)
        self.select_calls: List[Tuple[str, Dict]] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.failures: Dict[str, StoreError] = {}

    async def select(self, table, filter, order=()):
        self.select_calls.append((table, dict(filter)))
        gate = self.gates.get(filter.get("pet_id"))
        if gate is not None:
            await gate.wait()
        if table in self.failures:
            raise self.failures[table]
        return await super().select(table, filter, order)

    def log_loads(self, pet_id):
        return [f for table, f in self.select_calls if table == "logs" and f.get("pet_id") == pet_id]


def insert_pet(db, owner_id, name, created_at, species="dog", **extra):
    """Insert a pet directly into the database and return its id."""
    record = {
        "owner_id": owner_id,
        "name": name,
        "species": species,
        "breed": None,
        "date_of_birth": None,
        "notes": None,
        "photo_url": None,
        "created_at": created_at,
    }
    record.update(extra)
    return str(db["pets"].insert_one(record).inserted_id)


def insert_log(db, pet_id, log_type, timestamp, **extra):
    """Insert a care log directly into the database and return its id."""
    record = {
        "pet_id": pet_id,
        "type": log_type,
        "timestamp": timestamp,
        "quantity": None,
        "quantity_unit": None,
        "duration_mins": None,
        "caregiver": None,
        "notes": None,
    }
    record.update(extra)
    return str(db["logs"].insert_one(record).inserted_id)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def mock_db():
    """Create a mock MongoDB database for testing."""
    mock_client = MongoClient()
    mock_db = mock_client["test_db"]

    yield mock_db

    mock_client.drop_database("test_db")


@pytest.fixture
def bucket_factory():
    """Stand-in for GridFSBucket; uploads are recorded on ``return_value``."""
    return MagicMock()


@pytest.fixture
def store(mock_db, bucket_factory):
    return RecordingStore(mock_db, public_base_url="http://testserver", bucket_factory=bucket_factory)


@pytest.fixture
def auth(mock_db):
    return MongoAuth(mock_db, secret_key=JWT_SECRET)


@pytest.fixture
def app(store, auth):
    return CareLogApp(store, auth)


@pytest_asyncio.fixture
async def owner(auth):
    """Register the owner account (not signed in)."""
    return await auth.sign_up(OWNER_USERNAME, OWNER_PASSWORD)


@pytest_asyncio.fixture
async def started_app(app, owner):
    """App whose session gate is running, with nobody signed in yet."""
    await app.start()
    yield app
    app.stop()


@pytest.fixture
def sign_in(auth):
    """Coroutine factory that signs the owner in."""

    async def _sign_in(username=OWNER_USERNAME, password=OWNER_PASSWORD):
        return await auth.sign_in(username, password)

    return _sign_in


@pytest.fixture
def published(app):
    """Collect every event of the given names published on the app bus."""

    def _collect(*names):
        events = []
        for name in names:
            app.bus.subscribe(name, lambda _name=name, **payload: events.append((_name, payload)))
        return events

    return _collect
