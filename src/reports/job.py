"""Executive report job over the most recent reviews.

Runs on demand (``POST /generate-report``) or as an offline batch:
1. Fetches up to ``max_records`` recent reviews (oldest first)
2. Normalizes each into a compact ReportEntry, tolerating legacy field
   names (``review`` for ``reviewText``, ``timestamp`` for ``createdAt``)
3. Builds one prompt with a fixed four-section markdown layout
4. Calls the AI gateway in free-form mode at low temperature

Designed for external cron scheduling: ``0 8 * * 1 review-pulse report``
"""

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.ai.gateway import AIGateway
from src.observability.metrics import get_metrics
from src.reports.config import ReportConfig
from src.reports.prompts import REPORT_PROMPT
from src.reviews.repository import ReviewRepository
from src.reviews.schemas import StoredReview

logger = logging.getLogger(__name__)


class ReportEntry(BaseModel):
    """One review as shown to the report model.

    Kept small for token efficiency: no AI reply, summary or action.
    """

    rating: int | None = None
    text: str | None = None
    date: str | None = Field(default=None, description="YYYY-MM-DD (UTC)")
    sentiment: int | None = None
    tags: list[str] = Field(default_factory=list)


@dataclass
class ReportResult:
    """Outcome of a report run."""

    markdown: str | None
    review_count: int = 0
    elapsed_seconds: float = 0.0

    @property
    def no_data(self) -> bool:
        return self.markdown is None


def _to_date(value: Any) -> str | None:
    """Render an epoch-ms or ISO-8601 timestamp as a UTC date."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        if isinstance(value, (int, float)):
            moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        elif isinstance(value, str):
            moment = datetime.fromisoformat(value)
            if moment.tzinfo is not None:
                moment = moment.astimezone(timezone.utc)
        else:
            return None
    except (ValueError, OverflowError, OSError):
        return None
    return moment.date().isoformat()


def normalize_review(review: StoredReview) -> ReportEntry:
    """Project a stored document onto ReportEntry."""
    doc = review.document
    tags = doc.get("ai_tags") or []
    sentiment = doc.get("ai_sentiment")
    rating = doc.get("rating")
    text = doc.get("reviewText") or doc.get("review")
    return ReportEntry(
        rating=rating if isinstance(rating, int) and not isinstance(rating, bool) else None,
        text=str(text) if text is not None else None,
        date=_to_date(doc.get("createdAt") or doc.get("timestamp")),
        sentiment=round(sentiment) if isinstance(sentiment, (int, float)) else None,
        tags=[str(t) for t in tags] if isinstance(tags, list) else [],
    )


def build_report_prompt(entries: list[ReportEntry]) -> str:
    """Render the report prompt for a normalized dataset."""
    dataset = json.dumps([e.model_dump() for e in entries], ensure_ascii=False)
    return REPORT_PROMPT.format(count=len(entries), dataset=dataset)


class ReportJob:
    """Aggregate recent reviews into a markdown executive report.

    Args:
        gateway: AI gateway (free-form mode).
        repository: Review store (read only).
        config: Report settings (default: from env).
    """

    def __init__(
        self,
        gateway: AIGateway,
        repository: ReviewRepository,
        config: ReportConfig | None = None,
    ) -> None:
        self._gateway = gateway
        self._repository = repository
        self._config = config or ReportConfig()

    async def generate(self) -> ReportResult:
        """Generate a report.

        Returns:
            ReportResult with markdown, or ``no_data`` when the store is empty.

        Raises:
            StorageError: If recent reviews cannot be read.
            AIUnavailableError: If the AI call fails.
        """
        start_time = time.monotonic()
        metrics = get_metrics()

        reviews = await self._repository.recent(self._config.max_records)
        if not reviews:
            logger.info("No reviews found, skipping report")
            metrics.record_report("no_data")
            return ReportResult(markdown=None, elapsed_seconds=time.monotonic() - start_time)

        entries = [normalize_review(r) for r in reviews]
        prompt = build_report_prompt(entries)

        markdown = await self._gateway.summarize(
            prompt,
            temperature=self._config.temperature,
            max_output_tokens=self._config.max_output_tokens,
            fallback_text=self._config.fallback_text,
        )

        elapsed = time.monotonic() - start_time
        metrics.record_report("generated")
        logger.info("Report generated from %d reviews in %.2fs", len(entries), elapsed)
        return ReportResult(
            markdown=markdown,
            review_count=len(entries),
            elapsed_seconds=elapsed,
        )
