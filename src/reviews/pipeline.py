"""Submission pipeline: rate limit → validate → analyze → check → persist.

One call to ``SubmissionPipeline.submit`` walks a single submission through

    RECEIVED → RATE_LIMIT_CHECKED → VALIDATED → AI_INVOKED
             → RESPONSE_PARSED → PERSISTED → RESPONDED

and stops at the first failing stage with a RejectionReason. Nothing is
retried; callers may resubmit. The limiter is consulted synchronously before
any awaited call, so no limiter lock is held while waiting on the AI service
or the database.
"""

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from src.ai.gateway import AIGateway, AIUnavailableError, EmptyAIResponseError
from src.ai.validation import (
    AnalysisParseFailure,
    AnalysisSchemaFailure,
    validate_analysis,
)
from src.observability.metrics import get_metrics
from src.ratelimit.limiter import SlidingWindowRateLimiter
from src.reviews.repository import ReviewRepository
from src.reviews.schemas import ReviewRecord
from src.reviews.validation import InvalidSubmissionError, validate_submission
from src.storage.database import StorageError

logger = logging.getLogger(__name__)


class PipelineStage(str, enum.Enum):
    """Stages a submission moves through, in order."""

    RECEIVED = "received"
    RATE_LIMIT_CHECKED = "rate_limit_checked"
    VALIDATED = "validated"
    AI_INVOKED = "ai_invoked"
    RESPONSE_PARSED = "response_parsed"
    PERSISTED = "persisted"
    RESPONDED = "responded"


class RejectionReason(str, enum.Enum):
    """Terminal failure outcomes."""

    RATE_LIMITED = "rate_limited"
    INVALID_INPUT = "invalid_input"
    AI_UNAVAILABLE = "ai_unavailable"
    BAD_AI_OUTPUT = "bad_ai_output"
    PERSIST_FAILURE = "persist_failure"


@dataclass
class SubmissionResult:
    """Outcome of one pipeline run.

    Attributes:
        stage: Last stage reached (RESPONDED on success).
        rejection: Why the run stopped, or None on success.
        reply: AI-generated reply text (success only).
        review_id: Store-assigned id of the persisted record (success only).
        retry_after_seconds: Wait time when rate limited.
        field_errors: Field-level messages when input was invalid.
    """

    stage: PipelineStage
    rejection: RejectionReason | None = None
    reply: str | None = None
    review_id: str | None = None
    retry_after_seconds: int = 0
    field_errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.rejection is None

    @property
    def outcome(self) -> str:
        """Metric label for this result."""
        return self.rejection.value if self.rejection else PipelineStage.RESPONDED.value


class SubmissionPipeline:
    """Orchestrates one review submission end to end.

    Args:
        limiter: Shared per-client rate limiter, or None to disable admission
            control.
        gateway: AI gateway for structured analysis.
        repository: Append-only review store.
    """

    def __init__(
        self,
        limiter: SlidingWindowRateLimiter | None,
        gateway: AIGateway,
        repository: ReviewRepository,
    ) -> None:
        self._limiter = limiter
        self._gateway = gateway
        self._repository = repository

    async def submit(
        self,
        client_id: str,
        payload: Any,
        *,
        now_ms: int | None = None,
    ) -> SubmissionResult:
        """Run the pipeline for one submission.

        Args:
            client_id: Caller identity used for rate limiting.
            payload: Decoded request body (``{rating, review}``).
            now_ms: Admission time in epoch ms (default: wall clock).

        Returns:
            SubmissionResult describing success or the terminal rejection.
        """
        result = await self._run(client_id, payload, now_ms)
        metrics = get_metrics()
        metrics.record_submission(result.outcome)
        if self._limiter is not None:
            metrics.set_rate_limiter_clients(self._limiter.client_count)
        return result

    async def _run(
        self,
        client_id: str,
        payload: Any,
        now_ms: int | None,
    ) -> SubmissionResult:
        stage = PipelineStage.RECEIVED

        if self._limiter is not None:
            admission = self._limiter.admit(client_id, now_ms)
            if not admission.allowed:
                logger.info(
                    "Rate limited client %s (retry after %ds)",
                    client_id,
                    admission.retry_after_seconds,
                )
                return SubmissionResult(
                    stage=stage,
                    rejection=RejectionReason.RATE_LIMITED,
                    retry_after_seconds=admission.retry_after_seconds,
                )
        stage = PipelineStage.RATE_LIMIT_CHECKED

        try:
            submission = validate_submission(payload)
        except InvalidSubmissionError as e:
            return SubmissionResult(
                stage=stage,
                rejection=RejectionReason.INVALID_INPUT,
                field_errors=e.field_errors,
            )
        stage = PipelineStage.VALIDATED

        try:
            ai_result = await self._gateway.analyze(submission.rating, submission.text)
        except EmptyAIResponseError:
            logger.error("AI returned empty output for client %s", client_id)
            return SubmissionResult(stage=stage, rejection=RejectionReason.AI_UNAVAILABLE)
        except AIUnavailableError as e:
            logger.error("AI unavailable for client %s: %s", client_id, e)
            return SubmissionResult(stage=stage, rejection=RejectionReason.AI_UNAVAILABLE)
        stage = PipelineStage.AI_INVOKED

        analysis = validate_analysis(ai_result.raw)
        if isinstance(analysis, (AnalysisParseFailure, AnalysisSchemaFailure)):
            return SubmissionResult(stage=stage, rejection=RejectionReason.BAD_AI_OUTPUT)
        stage = PipelineStage.RESPONSE_PARSED

        record = ReviewRecord(
            submission=submission,
            analysis=analysis,
            latency_ms=ai_result.latency_ms,
            created_at_ms=int(time.time() * 1000),
        )
        try:
            review_id = await self._repository.append(record)
        except StorageError as e:
            logger.error("Failed to persist review: %s", e)
            return SubmissionResult(stage=stage, rejection=RejectionReason.PERSIST_FAILURE)

        logger.info(
            "Review %s stored (rating=%d, sentiment=%d, latency_ms=%d)",
            review_id,
            submission.rating,
            analysis.sentiment_score,
            ai_result.latency_ms,
        )
        return SubmissionResult(
            stage=PipelineStage.RESPONDED,
            reply=analysis.reply_text,
            review_id=review_id,
        )
