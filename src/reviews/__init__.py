"""Review intake: submission validation, enrichment records and persistence.

Components:
- ReviewSubmission / AIAnalysis / ReviewRecord: Dataclasses for each stage
- validate_submission: Field-level validation of the request body
- ReviewRepository: Append-only JSONB store with bounded-recency reads
- ALLOWED_TAGS: Fixed tag vocabulary for AI analysis

The orchestrating SubmissionPipeline lives in ``src.reviews.pipeline``.
"""

from src.reviews.repository import ReviewRepository
from src.reviews.schemas import (
    ALLOWED_TAGS,
    AIAnalysis,
    ReviewRecord,
    ReviewSubmission,
    StoredReview,
)
from src.reviews.validation import InvalidSubmissionError, validate_submission

__all__ = [
    "AIAnalysis",
    "ALLOWED_TAGS",
    "InvalidSubmissionError",
    "ReviewRecord",
    "ReviewRepository",
    "ReviewSubmission",
    "StoredReview",
    "validate_submission",
]
