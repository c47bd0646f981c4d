"""Shared fixtures: both store backends and an HTTP client over the in-memory one."""

import pytest
from httpx import ASGITransport, AsyncClient

from community_api.main import create_app
from community_api.metrics import Metrics
from community_api.settings import Settings
from community_api.stores import InMemoryStore, PostgresStore


def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'communities.db'}"


@pytest.fixture
async def memory_store():
    store = InMemoryStore()
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
async def sql_store(tmp_path):
    store = PostgresStore(sqlite_url(tmp_path))
    await store.connect()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "sql"])
async def store(request, tmp_path):
    """Each contract test runs once per backend."""
    if request.param == "memory":
        backend = InMemoryStore()
    else:
        backend = PostgresStore(sqlite_url(tmp_path))
    await backend.connect()
    yield backend
    await backend.close()


@pytest.fixture
def metrics() -> Metrics:
    return Metrics()


@pytest.fixture
def app(metrics: Metrics):
    return create_app(settings=Settings(_env_file=None), store=InMemoryStore(), metrics=metrics)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
