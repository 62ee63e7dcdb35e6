"""
Cachefront - Database Cache Driver

Stores cache entries as rows of a relational table through SQLAlchemy's
async engine. Expiration is delegated to the query: reads only match rows
whose ``expiration`` is NULL or still in the future.

Example:
    driver = DatabaseDriver(database_url="sqlite+aiosqlite:///./data/cache.db")
    await driver.put("greeting", {"msg": "hello"}, ttl=60)
    value = await driver.get("greeting")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sqlalchemy import ColumnElement, delete, func, or_, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ...errors import CacheConnectionError, CacheWriteConflictError
from ..interface import CacheDriver
from ..serialization import JsonCodec
from .db_models import Base, CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/cache.db"


def _naive_utc(value: datetime | None) -> datetime | None:
    """Drop tzinfo after converting to UTC; the table stores naive UTC."""
    if value is None:
        return None
    return value.astimezone(UTC).replace(tzinfo=None)


class DatabaseDriver(CacheDriver):
    """
    Table-backed cache driver.

    Notes:
    - Each operation opens its own session; the connection goes back to the
      pool when the ``async with`` block exits, whether it returns, raises
      or is cancelled.
    - The table is created on first use if it does not exist.
    - ``put`` is a delete followed by an insert, committed separately. A
      reader running between the two commits sees the key as absent, and
      two concurrent puts on the same key can collide on the primary key
      (the loser raises CacheWriteConflictError). Making this a single
      insert-or-replace needs dialect-specific upsert support.
    """

    backend = "database"

    def __init__(
        self,
        database_url: str = DEFAULT_DATABASE_URL,
        engine: AsyncEngine | None = None,
        prefix: str = "",
        codec: JsonCodec | None = None,
        echo: bool = False,
    ) -> None:
        """
        Initialize database cache driver.

        Args:
            database_url: SQLAlchemy async URL, ignored when ``engine`` is given
            engine: Existing engine to share; the driver will not dispose it
            prefix: Prefix for all keys
            codec: Value codec (JSON by default)
            echo: Log emitted SQL
        """
        super().__init__(prefix=prefix, codec=codec)

        self._owns_engine = engine is None
        if engine is None:
            url = make_url(database_url)
            connect_args = {"check_same_thread": False} if url.get_backend_name() == "sqlite" else {}
            engine = create_async_engine(url, echo=echo, connect_args=connect_args)

        self.engine: AsyncEngine = engine
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        self._initialized = False
        self._initialization_lock = asyncio.Lock()

    # ------------ Helpers ------------

    async def initialize(self) -> None:
        """
        Create the cache table if it doesn't exist.

        Safe to call multiple times (idempotent).
        """
        async with self._initialization_lock:
            if self._initialized:
                return

            url = self.engine.url
            if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
                Path(url.database).resolve().parent.mkdir(parents=True, exist_ok=True)

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            self._initialized = True
            logger.debug("Cache table ready", extra={"backend": self.backend, "table": CacheEntry.__tablename__})

    @asynccontextmanager
    async def _session(self, operation: str, key: str | None = None) -> AsyncGenerator[AsyncSession, None]:
        """
        Scoped session that translates SQLAlchemy failures into cache errors.

        A primary-key collision becomes CacheWriteConflictError; every other
        SQLAlchemy failure becomes CacheConnectionError.
        """
        try:
            if not self._initialized:
                await self.initialize()

            async with self.session_factory() as session:
                yield session
        except IntegrityError as e:
            logger.warning(
                f"Database cache {operation} lost a concurrent write for key '{key}': {e}",
                extra={"backend": self.backend, "operation": operation, "key": key, "error": str(e)},
            )
            raise CacheWriteConflictError(self.backend, str(key), {"operation": operation, "error": str(e)}) from e
        except SQLAlchemyError as e:
            logger.error(
                f"Database cache {operation} failed: {e}",
                extra={"backend": self.backend, "operation": operation, "key": key, "error": str(e)},
                exc_info=True,
            )
            raise CacheConnectionError(self.backend, operation, {"key": key, "error": str(e)}) from e

    def _unexpired(self) -> ColumnElement[bool]:
        now = _naive_utc(self._now())
        return or_(CacheEntry.expiration.is_(None), CacheEntry.expiration > now)

    # ------------ Core Interface ------------

    async def get(self, key: str, type_: Any = None) -> Any | None:
        """Retrieve the value of an unexpired row."""
        stmt = select(CacheEntry.value).where(CacheEntry.key == self._make_key(key), self._unexpired()).limit(1)

        async with self._session("get", key) as session:
            value = await session.scalar(stmt)

        if value is None:
            return None

        return self.codec.decode(value, type_)

    async def has(self, key: str) -> bool:
        """Count unexpired rows for the key."""
        stmt = (
            select(func.count())
            .select_from(CacheEntry)
            .where(CacheEntry.key == self._make_key(key), self._unexpired())
        )

        async with self._session("has", key) as session:
            count = await session.scalar(stmt)

        return bool(count)

    async def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Replace the row for the key (delete, then insert)."""
        payload = self._encode(key, value).decode("utf-8")
        expiration = _naive_utc(self._expires_at(ttl))
        storage_key = self._make_key(key)

        async with self._session("put", key) as session:
            # TODO: replace with a single insert-or-replace once dialect-specific upserts are wired in.
            await session.execute(delete(CacheEntry).where(CacheEntry.key == storage_key))
            await session.commit()

            session.add(CacheEntry(key=storage_key, value=payload, expiration=expiration))
            await session.commit()

    async def forget(self, key: str) -> None:
        """Delete the row for the key."""
        async with self._session("forget", key) as session:
            await session.execute(delete(CacheEntry).where(CacheEntry.key == self._make_key(key)))
            await session.commit()

    async def flush(self) -> None:
        """Delete every row of the cache table."""
        async with self._session("flush") as session:
            result = await session.execute(delete(CacheEntry))
            await session.commit()

        logger.info(
            "Cleared %d rows from cache table",
            result.rowcount,  # type: ignore[attr-defined]
            extra={"backend": self.backend, "table": CacheEntry.__tablename__},
        )

    async def close(self) -> None:
        """Dispose the engine if this driver created it. Errors are logged, not raised."""
        try:
            if self._owns_engine:
                await self.engine.dispose()
            logger.debug("Database cache driver closed", extra={"backend": self.backend})
        except Exception as e:
            logger.error(
                f"Error disposing database engine: {e}",
                extra={"backend": self.backend, "error": str(e)},
                exc_info=True,
            )
        finally:
            self._initialized = False
