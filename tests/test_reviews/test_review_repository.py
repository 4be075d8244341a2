"""Tests for ReviewRepository with a mocked database."""


import asyncpg
import pytest

from src.reviews.repository import ReviewRepository
from src.reviews.schemas import AIAnalysis, ReviewRecord, ReviewSubmission
from src.storage.database import StorageError


@pytest.fixture
def record() -> ReviewRecord:
    return ReviewRecord(
        submission=ReviewSubmission(rating=1, text="Package arrived broken"),
        analysis=AIAnalysis(
            reply_text="We're sorry to hear that.",
            summary="Damaged delivery",
            action="Offer a replacement",
            sentiment_score=8,
            tags=("Delivery",),
        ),
        latency_ms=1200,
        created_at_ms=1_700_000_000_000,
    )


class TestAppend:
    @pytest.mark.asyncio
    async def test_inserts_document(self, mock_database, record) -> None:
        mock_database.fetchval.side_effect = lambda sql, review_id, doc: review_id
        repo = ReviewRepository(mock_database)

        review_id = await repo.append(record)

        assert review_id.startswith("review_")
        sql, passed_id, payload = mock_database.fetchval.call_args.args
        assert "INSERT INTO reviews" in sql
        assert passed_id == review_id
        assert payload == record.to_document()

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, mock_database, record) -> None:
        mock_database.fetchval.side_effect = lambda sql, review_id, doc: review_id
        repo = ReviewRepository(mock_database)

        ids = {await repo.append(record) for _ in range(20)}

        assert len(ids) == 20

    @pytest.mark.asyncio
    async def test_driver_error_wrapped(self, mock_database, record) -> None:
        mock_database.fetchval.side_effect = asyncpg.PostgresError("disk full")
        repo = ReviewRepository(mock_database)

        with pytest.raises(StorageError, match="Failed to append review"):
            await repo.append(record)

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(self, mock_database, record) -> None:
        mock_database.fetchval.side_effect = OSError("connection refused")
        repo = ReviewRepository(mock_database)

        with pytest.raises(StorageError):
            await repo.append(record)

    @pytest.mark.asyncio
    async def test_missing_id_is_error(self, mock_database, record) -> None:
        mock_database.fetchval.return_value = None
        repo = ReviewRepository(mock_database)

        with pytest.raises(StorageError, match="no review id"):
            await repo.append(record)


class TestRecent:
    @pytest.mark.asyncio
    async def test_returns_documents_in_row_order(self, mock_database) -> None:
        mock_database.fetch.return_value = [
            {"review_id": "review_a", "document": {"rating": 2}},
            {"review_id": "review_b", "document": {"rating": 5}},
        ]
        repo = ReviewRepository(mock_database)

        reviews = await repo.recent(50)

        assert [r.review_id for r in reviews] == ["review_a", "review_b"]
        assert reviews[0].document == {"rating": 2}
        assert reviews[1].document == {"rating": 5}

    @pytest.mark.asyncio
    async def test_query_orders_oldest_first_within_limit(self, mock_database) -> None:
        repo = ReviewRepository(mock_database)

        await repo.recent(10)

        sql, limit = mock_database.fetch.call_args.args
        assert limit == 10
        assert "ORDER BY seq DESC" in sql
        assert "ORDER BY seq ASC" in sql

    @pytest.mark.asyncio
    async def test_non_positive_limit_skips_query(self, mock_database) -> None:
        repo = ReviewRepository(mock_database)

        assert await repo.recent(0) == []
        mock_database.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_wrapped(self, mock_database) -> None:
        mock_database.fetch.side_effect = asyncpg.PostgresError("boom")
        repo = ReviewRepository(mock_database)

        with pytest.raises(StorageError):
            await repo.recent()


@pytest.mark.asyncio
async def test_create_tables(mock_database) -> None:
    await ReviewRepository(mock_database).create_tables()

    sql = mock_database.execute.call_args.args[0]
    assert "CREATE TABLE IF NOT EXISTS reviews" in sql
    assert "JSONB" in sql
