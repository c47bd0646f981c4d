"""Data stores for communities and posts.

Backends:
- memory: in-process dicts guarded by a reader/writer lock (default)
- postgres: async SQLAlchemy over a pooled database connection

Select the backend with STORE_BACKEND. No HTTP concerns in stores.
"""

import logging

from community_api.settings import Settings
from community_api.stores.base import (
    CommunityNotFoundError,
    NotFoundError,
    PostNotFoundError,
    Store,
    StoreError,
    ValidationError,
)
from community_api.stores.memory import InMemoryStore
from community_api.stores.postgres import PostgresStore

logger = logging.getLogger("uvicorn.error")

POSTGRES_BACKENDS = ("postgres", "postgresql", "pg")


def create_store(settings: Settings) -> Store:
    """Build the store backend named by settings.store_backend.

    Args:
        settings: Application settings.

    Returns:
        An unconnected store. Call ``await store.connect()`` before use.

    Raises:
        ValueError: If the backend name is not recognised.
    """
    backend = settings.store_backend
    if backend in POSTGRES_BACKENDS:
        store = PostgresStore.from_settings(settings)
        logger.info(f"Using relational store at {store.safe_url}")
        return store
    if backend != "memory":
        raise ValueError(f"Unknown store backend: {backend!r}")
    logger.info("Using in-memory store")
    return InMemoryStore()


__all__ = [
    "CommunityNotFoundError",
    "InMemoryStore",
    "NotFoundError",
    "PostNotFoundError",
    "PostgresStore",
    "Store",
    "StoreError",
    "ValidationError",
    "create_store",
]
