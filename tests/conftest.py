"""Pytest configuration and fixtures."""

from collections import defaultdict
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from vaultshare.config import Settings, settings
from vaultshare.database.supabase_client import BackendConnector
from vaultshare.modules.auth.service import clear_auth_cache

TEST_URL = "https://test-project.supabase.co"
TEST_KEY = "test.anon.key"


def transient_error(message: str = "connection reset by peer") -> Exception:
    return httpx.ConnectError(message)


class FakeQuery:
    """Records a PostgREST builder chain; execute() returns the next queued outcome for the table."""

    def __init__(self, table: str, backend: "FakeBackend"):
        self.table_name = table
        self.backend = backend
        self.calls = []

    def __getattr__(self, name):
        def chain(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return chain

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    async def execute(self):
        self.backend.executions[self.table_name] += 1
        queue = self.backend.outcomes[self.table_name]
        outcome = queue.pop(0) if queue else []
        if isinstance(outcome, BaseException):
            raise outcome
        return SimpleNamespace(data=outcome)


class FakeBackend:
    def __init__(self):
        self.outcomes = defaultdict(list)
        self.executions = defaultdict(int)
        self.queries = []

    def queue(self, table: str, *outcomes):
        self.outcomes[table].extend(outcomes)

    def table(self, name: str) -> FakeQuery:
        query = FakeQuery(name, self)
        self.queries.append(query)
        return query

    def queries_for(self, table: str):
        return [q for q in self.queries if q.table_name == table]


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    """Keep backoff delays out of the test run."""
    monkeypatch.setattr(settings, "retry_base_delay", 0.0)
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def test_settings():
    return Settings(
        supabase_url=TEST_URL,
        supabase_anon_key=TEST_KEY,
        retry_base_delay=0.0,
        health_probe_delay=0.0,
    )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def bucket():
    bucket = MagicMock()
    bucket.upload = AsyncMock(return_value={"Key": "photos/object"})
    bucket.get_public_url = AsyncMock(
        side_effect=lambda key: f"{TEST_URL}/storage/v1/object/public/photos/{key}"
    )
    return bucket


@pytest.fixture
def fake_client(backend, bucket):
    storage = MagicMock()
    storage.from_.return_value = bucket
    auth = MagicMock()
    auth.get_user = AsyncMock()
    return SimpleNamespace(table=backend.table, storage=storage, auth=auth)


@pytest.fixture
def connector(test_settings, fake_client):
    connector = BackendConnector(test_settings, strict=True)
    connector.use_client(fake_client)
    return connector


def vault_row(vault_id: str, name: str, created_at: str, photos=None, created_by: str = "user-1"):
    row = {
        "id": vault_id,
        "name": name,
        "description": None,
        "color": "bg-blue-500",
        "created_at": created_at,
        "created_by": created_by,
    }
    if photos is not None:
        row["photos"] = photos
    return row


def photo_row(photo_id: str, vault_id: str = "vault-1", created_at: str = "2024-05-01T10:00:00+00:00", **extra):
    row = {
        "id": photo_id,
        "vault_id": vault_id,
        "uploaded_by": "user-1",
        "title": f"Photo {photo_id}",
        "description": "",
        "file_url": f"{TEST_URL}/storage/v1/object/public/photos/{photo_id}.jpg",
        "created_at": created_at,
    }
    row.update(extra)
    return row
