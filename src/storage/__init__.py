"""Storage layer: asyncpg connection pool management."""

from src.storage.database import DRIVER_ERRORS, Database, StorageError

__all__ = ["DRIVER_ERRORS", "Database", "StorageError"]
