"""
Request and response models for the review API.

Field names follow the wire format consumed by the existing web client
(``retryAfterSec`` is camelCase on purpose).
"""

from pydantic import BaseModel, Field

from src.reviews.schemas import MAX_RATING, MAX_REVIEW_LENGTH, MIN_RATING, MIN_REVIEW_LENGTH


class SubmitReviewRequest(BaseModel):
    """Documented body of POST /submit-review.

    The endpoint validates the raw JSON itself so that every violation is
    reported with a 400; this model only feeds the OpenAPI schema.
    """

    rating: int = Field(
        ...,
        ge=MIN_RATING,
        le=MAX_RATING,
        description=f"Star rating from {MIN_RATING} to {MAX_RATING}",
    )
    review: str = Field(
        ...,
        min_length=MIN_REVIEW_LENGTH,
        max_length=MAX_REVIEW_LENGTH,
        description=f"Review text ({MIN_REVIEW_LENGTH}-{MAX_REVIEW_LENGTH} characters)",
    )


class SubmitReviewResponse(BaseModel):
    """Successful submission."""

    success: bool = True
    message: str = Field(..., description="AI-generated reply to the customer")


class SubmitReviewError(BaseModel):
    """Failed submission."""

    success: bool = False
    error: str = Field(..., description="Human-readable error summary")
    details: dict[str, list[str]] | None = Field(
        default=None,
        description="Field-level validation messages (400 only)",
    )
    retryAfterSec: int | None = Field(
        default=None,
        description="Seconds to wait before retrying (429 only)",
    )


class ReportResponse(BaseModel):
    """Generated executive report."""

    report: str = Field(..., description="Markdown report")


class ReportNotFoundResponse(BaseModel):
    """No reviews to report on."""

    message: str


class ReportErrorResponse(BaseModel):
    """Report generation failed."""

    error: str


class ComponentHealth(BaseModel):
    """Health status for an individual infrastructure component."""

    status: str = Field(
        ...,
        description="Component status: healthy or unhealthy",
    )
    latency_ms: float | None = Field(
        default=None,
        description="Check latency in milliseconds",
    )
    details: dict = Field(
        default_factory=dict,
        description="Additional component details",
    )


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall service status: healthy, degraded, or unhealthy",
    )
    components: dict[str, ComponentHealth] = Field(default_factory=dict)
    rate_limiter_clients: int | None = Field(
        default=None,
        description="Client ids currently tracked by the rate limiter",
    )
    version: str = "0.1.0"
