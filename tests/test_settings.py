"""Settings parsing and store selection."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from community_api.settings import Settings
from community_api.stores import InMemoryStore, PostgresStore, create_store


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.port == 8080
    assert settings.store_backend == "memory"
    assert settings.db_pool_size == 5
    assert settings.db_max_overflow == 5
    assert settings.db_pool_recycle_seconds == 1800


def test_async_database_url_rewrites_driver():
    settings = Settings(_env_file=None, database_url="postgresql://u:p@db:5432/communities")
    assert settings.async_database_url == "postgresql+asyncpg://u:p@db:5432/communities"


def test_async_database_url_keeps_explicit_driver():
    url = "sqlite+aiosqlite:///./communities.db"
    assert Settings(_env_file=None, database_url=url).async_database_url == url


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('["https://a.com","http://localhost:3000"]', ["https://a.com", "http://localhost:3000"]),
        ("https://a.com, http://localhost:3000", ["https://a.com", "http://localhost:3000"]),
        ("", []),
    ],
)
def test_cors_origins_parsing(raw: str, expected: list[str]):
    assert Settings(_env_file=None, cors_origins=raw).cors_origins == expected


def test_cors_origins_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.com,https://b.com")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://ignored.com")
    assert Settings(_env_file=None).cors_origins == ["https://a.com", "https://b.com"]


def test_cors_origins_rejects_malformed_json():
    with pytest.raises(PydanticValidationError):
        Settings(_env_file=None, cors_origins='["https://a.com",')


def test_store_backend_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("STORE_BACKEND", " Postgres ")
    assert Settings(_env_file=None).store_backend == "postgres"


def test_create_store_memory():
    assert isinstance(create_store(Settings(_env_file=None)), InMemoryStore)


@pytest.mark.parametrize("backend", ["postgres", "postgresql", "pg"])
def test_create_store_relational(backend: str, tmp_path):
    settings = Settings(
        _env_file=None,
        store_backend=backend,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'db.sqlite'}",
    )
    assert isinstance(create_store(settings), PostgresStore)


def test_create_store_unknown_backend():
    with pytest.raises(ValueError):
        create_store(Settings(_env_file=None, store_backend="mongo"))
