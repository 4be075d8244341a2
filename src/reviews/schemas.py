"""Schema definitions for review submissions, AI analyses and stored records.

A ReviewRecord serializes to the ``reviews`` document shape shared with the
dashboards: ``rating, reviewText, ai_response, ai_summary, ai_action,
ai_sentiment, ai_tags, latency_ms, createdAt``.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, get_args

Tag = Literal["Quality", "Price", "Service", "Delivery", "App Experience"]

ALLOWED_TAGS: tuple[str, ...] = get_args(Tag)

MAX_TAGS = 3

MIN_RATING = 1
MAX_RATING = 5
MIN_REVIEW_LENGTH = 5
MAX_REVIEW_LENGTH = 1000


@dataclass(frozen=True)
class ReviewSubmission:
    """A validated customer submission.

    Attributes:
        rating: Star rating from 1 to 5.
        text: Free-text review, 5 to 1000 characters.
    """

    rating: int
    text: str


@dataclass(frozen=True)
class AIAnalysis:
    """Schema-checked analysis of one review produced by the AI gateway.

    Attributes:
        reply_text: Customer-facing reply.
        summary: Short summary (intended to be ten words or fewer).
        action: Suggested follow-up for the team.
        sentiment_score: Integer sentiment from 0 (negative) to 100 (positive).
        tags: Up to three tags from ALLOWED_TAGS. Duplicates are kept.
    """

    reply_text: str
    summary: str
    action: str
    sentiment_score: int
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReviewRecord:
    """A fully enriched review, ready to append to the store."""

    submission: ReviewSubmission
    analysis: AIAnalysis
    latency_ms: int
    created_at_ms: int

    def __post_init__(self) -> None:
        if self.latency_ms < 0:
            raise ValueError(f"latency_ms must be non-negative, got {self.latency_ms}")

    def to_document(self) -> dict[str, Any]:
        """Serialize to the persisted document shape."""
        return {
            "rating": self.submission.rating,
            "reviewText": self.submission.text,
            "ai_response": self.analysis.reply_text,
            "ai_summary": self.analysis.summary,
            "ai_action": self.analysis.action,
            "ai_sentiment": self.analysis.sentiment_score,
            "ai_tags": list(self.analysis.tags),
            "latency_ms": self.latency_ms,
            "createdAt": self.created_at_ms,
        }


@dataclass
class StoredReview:
    """A row read back from the store.

    ``document`` is kept as the raw mapping because older rows may carry
    legacy field names (``review``, ``timestamp``).
    """

    review_id: str
    document: dict[str, Any] = field(default_factory=dict)
