"""
PostgreSQL connection pool shared by the API and the CLI jobs.

One asyncpg pool is created at process start (the application lifespan or
a CLI command) and reused for every query. JSONB values are encoded from
and decoded to Python objects on every pooled connection.
"""

import json
import logging
from types import TracebackType
from typing import Any

import asyncpg

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Everything that means "the store is unreachable or rejected the query"
DRIVER_ERRORS: tuple[type[Exception], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    RuntimeError,
)


class StorageError(Exception):
    """Raised when a read or write against the store fails."""


async def _init_connection(conn: asyncpg.Connection) -> None:
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


class Database:
    """
    Owner of the asyncpg pool.

    Usage:
        async with Database() as db:
            await db.fetchval("SELECT 1")

    Args:
        database_url: PostgreSQL connection URL (default: DATABASE_URL)
        min_size: Minimum pool size
        max_size: Maximum pool size
        command_timeout: Per-statement timeout in seconds
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
        self._command_timeout = command_timeout or settings.db_command_timeout_seconds

        self._pool: asyncpg.Pool | None = None

    @property
    def connected(self) -> bool:
        return self._pool is not None

    @property
    def pool(self) -> asyncpg.Pool:
        """Get connection pool, raising if not connected."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    async def connect(self) -> None:
        """Create the pool. Calling it on a connected instance is a no-op."""
        if self._pool is not None:
            return
        try:
            self._pool = await asyncpg.create_pool(
                self._database_url,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout,
                init=_init_connection,
            )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error("Failed to connect to database: %s", e)
            raise StorageError(f"Failed to connect to database: {e}") from e

        logger.info("Database connected (pool: %d-%d)", self._min_size, self._max_size)

    async def close(self) -> None:
        """Close the pool if open."""
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("Database connection closed")

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

    async def execute(self, query: str, *args: Any) -> str:
        """Run a statement and return the PostgreSQL status string."""
        return await self.pool.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Run a query and return every row."""
        return await self.pool.fetch(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        """Run a query and return the first column of the first row."""
        return await self.pool.fetchval(query, *args)

    async def health_check(self) -> bool:
        """Return True if a trivial query round-trips."""
        try:
            return await self.fetchval("SELECT 1") == 1
        except DRIVER_ERRORS as e:
            logger.warning("Database health check failed: %s", e)
            return False
