"""Tests for the review submission pipeline."""

import json
from unittest.mock import AsyncMock, MagicMock

import openai
import pytest

from src.ai.gateway import (
    AIGateway,
    AIResult,
    AIUnavailableError,
    EmptyAIResponseError,
)
from src.ratelimit.limiter import SlidingWindowRateLimiter
from src.reviews.pipeline import (
    PipelineStage,
    RejectionReason,
    SubmissionPipeline,
)
from src.storage.database import StorageError

VALID_PAYLOAD = {"rating": 5, "review": "Fast delivery and helpful staff"}

ANALYSIS = {
    "response": "Thank you for shopping with us!",
    "summary": "Fast delivery, helpful staff",
    "action": "Thank the delivery team",
    "sentiment_score": 91.6,
    "tags": ["Delivery", "Service"],
}


@pytest.fixture
def gateway():
    gw = MagicMock()
    gw.analyze = AsyncMock(return_value=AIResult(raw=json.dumps(ANALYSIS), latency_ms=420))
    return gw


@pytest.fixture
def repository():
    repo = MagicMock()
    repo.append = AsyncMock(return_value="review_abc123")
    return repo


@pytest.fixture
def limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(window_ms=60_000, max_requests=5)


@pytest.fixture
def pipeline(limiter, gateway, repository) -> SubmissionPipeline:
    return SubmissionPipeline(limiter=limiter, gateway=gateway, repository=repository)


class TestSuccess:
    async def test_returns_reply_and_id(self, pipeline, gateway) -> None:
        result = await pipeline.submit("10.0.0.1", VALID_PAYLOAD)

        assert result.ok
        assert result.stage == PipelineStage.RESPONDED
        assert result.reply == "Thank you for shopping with us!"
        assert result.review_id == "review_abc123"
        assert result.outcome == "responded"
        gateway.analyze.assert_awaited_once_with(5, "Fast delivery and helpful staff")

    async def test_persists_enriched_record(self, pipeline, repository) -> None:
        await pipeline.submit("10.0.0.1", VALID_PAYLOAD)

        record = repository.append.call_args.args[0]
        doc = record.to_document()
        assert doc["rating"] == 5
        assert doc["reviewText"] == "Fast delivery and helpful staff"
        assert doc["ai_sentiment"] == 92
        assert doc["ai_tags"] == ["Delivery", "Service"]
        assert doc["latency_ms"] == 420
        assert isinstance(doc["createdAt"], int)

    async def test_limiter_disabled(self, gateway, repository) -> None:
        pipeline = SubmissionPipeline(limiter=None, gateway=gateway, repository=repository)

        results = [await pipeline.submit("10.0.0.1", VALID_PAYLOAD) for _ in range(7)]

        assert all(r.ok for r in results)


class TestRateLimited:
    async def test_sixth_submission_rejected(self, pipeline, gateway) -> None:
        now = 1_700_000_000_000
        for _ in range(5):
            assert (await pipeline.submit("10.0.0.1", VALID_PAYLOAD, now_ms=now)).ok

        result = await pipeline.submit("10.0.0.1", VALID_PAYLOAD, now_ms=now + 1000)

        assert result.rejection == RejectionReason.RATE_LIMITED
        assert result.stage == PipelineStage.RECEIVED
        assert result.retry_after_seconds == 59
        assert gateway.analyze.await_count == 5

    async def test_limit_checked_before_validation(self, pipeline) -> None:
        now = 1_700_000_000_000
        for _ in range(5):
            await pipeline.submit("10.0.0.1", {"rating": 0}, now_ms=now)

        result = await pipeline.submit("10.0.0.1", {"rating": 0}, now_ms=now)

        assert result.rejection == RejectionReason.RATE_LIMITED


class TestInvalidInput:
    async def test_no_ai_call_or_write(self, pipeline, gateway, repository) -> None:
        result = await pipeline.submit("10.0.0.1", {"rating": 7, "review": "hey"})

        assert result.rejection == RejectionReason.INVALID_INPUT
        assert result.stage == PipelineStage.RATE_LIMIT_CHECKED
        assert set(result.field_errors) == {"rating", "review"}
        gateway.analyze.assert_not_called()
        repository.append.assert_not_called()

    async def test_missing_body(self, pipeline) -> None:
        result = await pipeline.submit("10.0.0.1", None)

        assert result.rejection == RejectionReason.INVALID_INPUT
        assert "body" in result.field_errors


class TestAIFailures:
    @pytest.mark.parametrize(
        "error",
        [AIUnavailableError("timed out"), EmptyAIResponseError("no text")],
    )
    async def test_ai_unavailable(self, pipeline, gateway, repository, error) -> None:
        gateway.analyze.side_effect = error

        result = await pipeline.submit("10.0.0.1", VALID_PAYLOAD)

        assert result.rejection == RejectionReason.AI_UNAVAILABLE
        assert result.stage == PipelineStage.VALIDATED
        repository.append.assert_not_called()

    @pytest.mark.parametrize(
        "raw",
        [
            "Sure! Here is the analysis.",
            json.dumps({**ANALYSIS, "sentiment_score": 101}),
            json.dumps({**ANALYSIS, "tags": ["Quality", "Price", "Service", "Delivery"]}),
            json.dumps({k: v for k, v in ANALYSIS.items() if k != "summary"}),
        ],
    )
    async def test_bad_output_not_persisted(self, pipeline, gateway, repository, raw) -> None:
        gateway.analyze.return_value = AIResult(raw=raw, latency_ms=300)

        result = await pipeline.submit("10.0.0.1", VALID_PAYLOAD)

        assert result.rejection == RejectionReason.BAD_AI_OUTPUT
        assert result.stage == PipelineStage.AI_INVOKED
        assert result.reply is None
        repository.append.assert_not_called()

    async def test_sdk_error_through_real_gateway(
        self, limiter, repository, openai_client, ai_config
    ) -> None:
        openai_client.chat.completions.create.side_effect = openai.OpenAIError("down")
        pipeline = SubmissionPipeline(
            limiter=limiter,
            gateway=AIGateway(openai_client, ai_config),
            repository=repository,
        )

        result = await pipeline.submit("10.0.0.1", VALID_PAYLOAD)

        assert result.rejection == RejectionReason.AI_UNAVAILABLE


class TestPersistFailure:
    async def test_storage_error(self, pipeline, repository) -> None:
        repository.append.side_effect = StorageError("connection lost")

        result = await pipeline.submit("10.0.0.1", VALID_PAYLOAD)

        assert result.rejection == RejectionReason.PERSIST_FAILURE
        assert result.stage == PipelineStage.RESPONSE_PARSED
        assert result.reply is None
        assert result.outcome == "persist_failure"
