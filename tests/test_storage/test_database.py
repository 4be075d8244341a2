"""Tests for the Database connection manager."""

from unittest.mock import AsyncMock, patch

import asyncpg
import pytest

from src.storage.database import Database, StorageError


class TestDatabase:
    def test_pool_requires_connect(self):
        db = Database(database_url="postgresql://localhost/test")

        with pytest.raises(RuntimeError, match="not connected"):
            _ = db.pool

    def test_settings_defaults(self, test_settings):
        with patch("src.storage.database.get_settings", return_value=test_settings):
            db = Database()

        assert db._database_url == str(test_settings.database_url)
        assert db._min_size == test_settings.db_pool_min_size
        assert db._max_size == test_settings.db_pool_max_size

    @pytest.mark.asyncio
    async def test_connect_and_close(self):
        pool = AsyncMock()
        with patch("asyncpg.create_pool", AsyncMock(return_value=pool)) as create_pool:
            async with Database(database_url="postgresql://localhost/test") as db:
                assert db.pool is pool

        create_pool.assert_awaited_once()
        pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_health_check_ok(self):
        db = Database(database_url="postgresql://localhost/test")
        db.fetchval = AsyncMock(return_value=1)

        assert await db.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_not_connected(self):
        db = Database(database_url="postgresql://localhost/test")

        assert await db.health_check() is False

    @pytest.mark.asyncio
    async def test_health_check_driver_error(self):
        db = Database(database_url="postgresql://localhost/test")
        db.fetchval = AsyncMock(side_effect=asyncpg.InterfaceError("pool is closed"))

        assert await db.health_check() is False

    @pytest.mark.asyncio
    async def test_connect_failure_raises_storage_error(self):
        db = Database(database_url="postgresql://localhost/test")

        with patch("asyncpg.create_pool", AsyncMock(side_effect=OSError("refused"))):
            with pytest.raises(StorageError, match="Failed to connect"):
                await db.connect()

        assert not db.connected

    @pytest.mark.asyncio
    async def test_queries_go_through_pool(self):
        pool = AsyncMock()
        pool.fetchval = AsyncMock(return_value=1)
        with patch("asyncpg.create_pool", AsyncMock(return_value=pool)):
            db = Database(database_url="postgresql://localhost/test")
            await db.connect()

        assert await db.fetchval("SELECT 1") == 1
        pool.fetchval.assert_awaited_once_with("SELECT 1")
