"""Relational store with async SQLAlchemy.

Handles:
- Connection pooling (bounded size, recycled connections, pre-ping)
- Idempotent schema creation on connect
- Mapping the store contract onto communities/posts tables

Any async SQLAlchemy URL works. PostgreSQL via asyncpg in production,
SQLite via aiosqlite in tests.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable
from contextlib import asynccontextmanager
from datetime import timezone
from typing import Any, TypeVar

from sqlalchemy import delete, event, select, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from community_api.models import Base, CommunityRecord, PostRecord
from community_api.schemas import Community, CommunityInput, Post, PostInput
from community_api.settings import Settings
from community_api.stores.base import (
    CommunityNotFoundError,
    PostNotFoundError,
    new_id,
    utc_now,
    validate_community_input,
    validate_post_input,
)

logger = logging.getLogger("uvicorn.error")

T = TypeVar("T")

# SQLSTATE for foreign_key_violation
PG_FOREIGN_KEY_VIOLATION = "23503"


def _is_sqlite(database_url: str) -> bool:
    return make_url(database_url).get_backend_name() == "sqlite"


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """SQLite ignores REFERENCES clauses unless asked per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == PG_FOREIGN_KEY_VIOLATION:
        return True
    return "FOREIGN KEY constraint failed" in str(orig)


def _to_community(row: CommunityRecord) -> Community:
    return Community(id=row.id, name=row.name, description=row.description or "")


def _to_post(row: PostRecord) -> Post:
    created_at = row.created_at
    # SQLite hands back naive datetimes
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Post(
        id=row.id,
        community_id=row.community_id,
        author_id=row.author_id or "",
        title=row.title,
        content=row.content,
        created_at=created_at,
    )


class PostgresStore:
    """Store backed by a relational database.

    The engine owns the connection pool and is safe to share between
    concurrent requests. Each operation runs in its own session and
    transaction and is bounded by ``operation_timeout`` seconds.
    """

    def __init__(
        self,
        database_url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 5,
        pool_recycle: int = 1800,
        operation_timeout: float = 5.0,
        echo: bool = False,
    ) -> None:
        self._url = database_url
        self._operation_timeout = operation_timeout

        options: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        if not _is_sqlite(database_url):
            options.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=pool_recycle,
            )
        self._engine = create_async_engine(database_url, **options)
        if _is_sqlite(database_url):
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PostgresStore":
        return cls(
            settings.async_database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=settings.db_pool_recycle_seconds,
            operation_timeout=settings.db_operation_timeout_seconds,
            echo=settings.debug,
        )

    @property
    def safe_url(self) -> str:
        return make_url(self._url).render_as_string(hide_password=True)

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session scoped to one transaction.

        Rolls back on any exit other than success, cancellation included,
        so the connection goes back to the pool clean.
        """
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise

    async def _run(self, operation: Awaitable[T]) -> T:
        return await asyncio.wait_for(operation, timeout=self._operation_timeout)

    # ============================================================
    # Lifecycle
    # ============================================================

    async def connect(self) -> None:
        """Round-trip health check, then create missing tables."""
        await self._run(self._connect())
        logger.info(f"Database connected at {self.safe_url}")

    async def _connect(self) -> None:
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """True when a pooled connection answers ``SELECT 1`` within the operation timeout."""
        try:
            await self._run(self._ping())
            return True
        except (SQLAlchemyError, OSError, asyncio.TimeoutError):
            logger.warning(f"Database ping failed for {self.safe_url}")
            return False

    async def _ping(self) -> None:
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("Database connection pool closed")

    # ============================================================
    # Communities
    # ============================================================

    async def list_communities(self) -> list[Community]:
        return await self._run(self._list_communities())

    async def _list_communities(self) -> list[Community]:
        async with self._session() as session:
            rows = await session.scalars(
                select(CommunityRecord).order_by(CommunityRecord.seq.asc())
            )
            return [_to_community(row) for row in rows]

    async def create_community(self, data: CommunityInput) -> Community:
        validate_community_input(data)
        return await self._run(self._create_community(data))

    async def _create_community(self, data: CommunityInput) -> Community:
        record = CommunityRecord(
            id=new_id(),
            name=data.name,
            description=data.description,
        )
        async with self._session() as session:
            session.add(record)
        return _to_community(record)

    async def delete_community(self, community_id: str) -> None:
        await self._run(self._delete_community(community_id))

    async def _delete_community(self, community_id: str) -> None:
        async with self._session() as session:
            result = await session.execute(
                delete(CommunityRecord)
                .where(CommunityRecord.id == community_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise CommunityNotFoundError(community_id)

    # ============================================================
    # Posts
    # ============================================================

    async def list_posts_by_community(self, community_id: str) -> list[Post]:
        return await self._run(self._list_posts_by_community(community_id))

    async def _list_posts_by_community(self, community_id: str) -> list[Post]:
        async with self._session() as session:
            rows = (
                await session.scalars(
                    select(PostRecord)
                    .where(PostRecord.community_id == community_id)
                    .order_by(PostRecord.seq.asc())
                )
            ).all()

            # No rows: either an empty community or a missing one
            if not rows and not await self._community_exists(session, community_id):
                raise CommunityNotFoundError(community_id)

            return [_to_post(row) for row in rows]

    async def create_post(self, community_id: str, data: PostInput) -> Post:
        validate_post_input(data)
        return await self._run(self._create_post(community_id, data))

    async def _create_post(self, community_id: str, data: PostInput) -> Post:
        record = PostRecord(
            id=new_id(),
            community_id=community_id,
            author_id=data.author_id,
            title=data.title,
            content=data.content,
            created_at=utc_now(),
        )
        try:
            async with self._session() as session:
                session.add(record)
        except IntegrityError as e:
            if _is_foreign_key_violation(e):
                raise CommunityNotFoundError(community_id) from e
            raise
        return _to_post(record)

    async def delete_post(self, community_id: str, post_id: str) -> None:
        await self._run(self._delete_post(community_id, post_id))

    async def _delete_post(self, community_id: str, post_id: str) -> None:
        async with self._session() as session:
            result = await session.execute(
                delete(PostRecord)
                .where(PostRecord.id == post_id, PostRecord.community_id == community_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                return
            if not await self._community_exists(session, community_id):
                raise CommunityNotFoundError(community_id)
            raise PostNotFoundError(community_id, post_id)

    @staticmethod
    async def _community_exists(session: AsyncSession, community_id: str) -> bool:
        found = await session.scalar(select(CommunityRecord.id).where(CommunityRecord.id == community_id))
        return found is not None
