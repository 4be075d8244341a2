"""Append-only review store backed by a PostgreSQL JSONB table.

Each review is one JSON document keyed by a store-assigned id. Rows are
never updated or deleted here; ``seq`` preserves insertion order for the
bounded-recency read used by the report job.
"""

import logging
import uuid
from typing import Any


from src.reviews.schemas import ReviewRecord, StoredReview
from src.storage.database import DRIVER_ERRORS, Database, StorageError

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 50

_CREATE_TABLES_SQL = """
    CREATE TABLE IF NOT EXISTS reviews (
        review_id TEXT PRIMARY KEY,
        seq BIGSERIAL NOT NULL,
        document JSONB NOT NULL,
        inserted_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_reviews_seq ON reviews (seq DESC);
"""


def _new_review_id() -> str:
    return f"review_{uuid.uuid4().hex[:12]}"


class ReviewRepository:
    """Repository for review persistence and recency reads.

    Provides create_tables, append, and recent. Driver and I/O failures
    surface as StorageError.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_tables(self) -> None:
        """Create the reviews table and index if missing."""
        await self._db.execute(_CREATE_TABLES_SQL)
        logger.info("Reviews table ready")

    async def append(self, record: ReviewRecord) -> str:
        """Insert a review document.

        Args:
            record: Enriched review to persist.

        Returns:
            The store-assigned review id.

        Raises:
            StorageError: If the insert fails.
        """
        review_id = _new_review_id()
        sql = """
            INSERT INTO reviews (review_id, document)
            VALUES ($1, $2)
            RETURNING review_id
        """
        try:
            stored_id = await self._db.fetchval(sql, review_id, record.to_document())
        except DRIVER_ERRORS as e:
            logger.error("Failed to append review %s: %s", review_id, e)
            raise StorageError(f"Failed to append review: {e}") from e

        if stored_id is None:
            raise StorageError("Insert returned no review id")
        return stored_id

    async def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[StoredReview]:
        """Get the most recent reviews in chronological order.

        Args:
            limit: Maximum number of reviews to return.

        Returns:
            Up to ``limit`` reviews, oldest first.

        Raises:
            StorageError: If the query fails.
        """
        if limit <= 0:
            return []

        sql = """
            SELECT review_id, document FROM (
                SELECT review_id, document, seq FROM reviews
                ORDER BY seq DESC
                LIMIT $1
            ) latest
            ORDER BY seq ASC
        """
        try:
            rows = await self._db.fetch(sql, limit)
        except DRIVER_ERRORS as e:
            logger.error("Failed to read recent reviews: %s", e)
            raise StorageError(f"Failed to read recent reviews: {e}") from e

        return [_row_to_review(row) for row in rows]


def _row_to_review(row: Any) -> StoredReview:
    """Convert an asyncpg Record to a StoredReview."""
    # JSONB is decoded by the pool codec
    return StoredReview(review_id=row["review_id"], document=row["document"] or {})
