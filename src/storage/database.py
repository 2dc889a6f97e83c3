"""
PostgreSQL access for the forum database.

One asyncpg pool serves both the read side (Discourse ``posts`` and
``topics``) and the write side (the event index table).
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Any

import asyncpg

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

APPLICATION_NAME = "forum-events"


class Database:
    """
    Pooled asyncpg connection manager.

    Connections are tagged with ``application_name`` so indexer sessions
    are identifiable in ``pg_stat_activity`` on the shared forum database.

    Usage:
        async with Database() as db:
            rows = await db.fetch("SELECT id FROM posts WHERE topic_id = $1", 7)
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
        command_timeout: float | None = None,
    ):
        settings = get_settings()

        self._database_url = database_url or str(settings.database_url)
        self._min_size = min_size or settings.db_pool_min_size
        self._max_size = max_size or settings.db_pool_max_size
        self._command_timeout = command_timeout or settings.db_command_timeout

        self._pool: asyncpg.Pool | None = None

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Create the pool. Calling connect() on a connected instance is a no-op."""
        if self._pool is not None:
            return
        try:
            self._pool = await asyncpg.create_pool(
                self._database_url,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout,
                server_settings={"application_name": APPLICATION_NAME},
            )
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error("Failed to connect to the forum database: %s", e)
            raise
        logger.info("Database pool ready (%d-%d connections)", self._min_size, self._max_size)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def pool(self) -> asyncpg.Pool:
        """The live pool; raises RuntimeError before connect()."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        async with self.pool.acquire() as conn:
            yield conn

    async def execute(self, query: str, *args: Any) -> str:
        """Run a statement and return its status tag, e.g. ``"DELETE 1"``."""
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def table_exists(self, table: str) -> bool:
        """True if ``table`` is visible on the current search path."""
        return bool(await self.fetchval("SELECT to_regclass($1) IS NOT NULL", table))

    async def health_check(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            return await self.fetchval("SELECT 1") == 1
        except (OSError, RuntimeError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.warning("Database health check failed: %s", e)
            return False
