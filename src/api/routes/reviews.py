"""Review submission endpoint."""

import time

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from starlette.requests import Request

from src.api.dependencies import get_submission_pipeline
from src.api.models import SubmitReviewError, SubmitReviewRequest, SubmitReviewResponse
from src.api.rate_limit import get_client_id
from src.reviews.pipeline import RejectionReason, SubmissionPipeline, SubmissionResult

logger = structlog.get_logger(__name__)
router = APIRouter()

# Server-side failures share generic messages; details stay in the logs
_SERVER_ERRORS: dict[RejectionReason, str] = {
    RejectionReason.AI_UNAVAILABLE: "AI service unavailable",
    RejectionReason.BAD_AI_OUTPUT: "Invalid AI response structure",
    RejectionReason.PERSIST_FAILURE: "Failed to save review",
}


def _error(status_code: int, body: SubmitReviewError, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _to_response(result: SubmissionResult) -> JSONResponse:
    if result.ok:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=SubmitReviewResponse(message=result.reply or "").model_dump(),
        )

    if result.rejection == RejectionReason.RATE_LIMITED:
        return _error(
            status.HTTP_429_TOO_MANY_REQUESTS,
            SubmitReviewError(
                error="Rate limit exceeded. Please try again shortly.",
                retryAfterSec=result.retry_after_seconds,
            ),
            headers={"Retry-After": str(result.retry_after_seconds)},
        )

    if result.rejection == RejectionReason.INVALID_INPUT:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            SubmitReviewError(error="Invalid input", details=result.field_errors),
        )

    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        SubmitReviewError(error=_SERVER_ERRORS.get(result.rejection, "Internal server error")),
    )


@router.post(
    "/submit-review",
    response_model=SubmitReviewResponse,
    responses={
        400: {"model": SubmitReviewError, "description": "Invalid input"},
        429: {"model": SubmitReviewError, "description": "Rate limit exceeded"},
        500: {"model": SubmitReviewError, "description": "AI or storage failure"},
    },
    summary="Submit a customer review",
    description="""
    Submit a star rating and review text.

    The review is analyzed by the AI service (reply, summary, suggested action,
    sentiment score, tags) and stored. The AI reply is returned as `message`.
    Limited to 5 submissions per client per minute.
    """,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": SubmitReviewRequest.model_json_schema()},
            },
        },
    },
)
async def submit_review(
    request: Request,
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
) -> JSONResponse:
    start_time = time.perf_counter()
    client_id = get_client_id(request)

    try:
        payload = await request.json()
    except ValueError:
        # Reported by validation as a body-level error, after the rate limit check
        payload = None

    try:
        result = await pipeline.submit(client_id, payload)
    except Exception as e:
        logger.error("submit_review_failed", error=str(e), exc_info=True)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            SubmitReviewError(error="Internal server error"),
        )

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Review submission handled",
        client_id=client_id,
        outcome=result.outcome,
        stage=result.stage.value,
        review_id=result.review_id,
        latency_ms=round(latency_ms, 2),
    )
    return _to_response(result)
