"""Parsing and schema checks for structured AI output.

``validate_analysis`` never raises on bad model output. It returns a tagged
outcome instead: an AIAnalysis on success, AnalysisParseFailure when the text
is not JSON, or AnalysisSchemaFailure with the flattened list of violations.
"""

import json
import logging
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.reviews.schemas import MAX_TAGS, AIAnalysis, Tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisParseFailure:
    """Model output was not valid JSON."""

    error: str


@dataclass(frozen=True)
class AnalysisSchemaFailure:
    """Model output was JSON but did not match the analysis schema."""

    violations: list[str] = field(default_factory=list)


AnalysisOutcome = AIAnalysis | AnalysisParseFailure | AnalysisSchemaFailure


class AnalysisPayload(BaseModel):
    """Expected JSON object returned by the model."""

    model_config = ConfigDict(extra="ignore")

    response: str = Field(min_length=1, strict=True)
    summary: str = Field(min_length=1, strict=True)
    action: str = Field(min_length=1, strict=True)
    # strict: accepts int and float, rejects bool and numeric strings
    sentiment_score: float = Field(ge=0, le=100, strict=True)
    tags: list[Tag] = Field(default_factory=list, max_length=MAX_TAGS)


def _round_half_up(value: float) -> int:
    # round() is banker's rounding; 50.5 must become 51
    return int(value + 0.5)


def _flatten(exc: ValidationError) -> list[str]:
    violations = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        violations.append(f"{loc}: {err['msg']}")
    return violations


def validate_analysis(raw: str) -> AnalysisOutcome:
    """Parse and schema-check raw structured output.

    Args:
        raw: Text returned by ``AIGateway.analyze``.

    Returns:
        AIAnalysis with sentiment rounded to the nearest integer, or a
        failure outcome. Raw text is logged on failure, never returned.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Failed to parse AI response as JSON: %s; raw=%r", e, raw)
        return AnalysisParseFailure(error=str(e))

    try:
        payload = AnalysisPayload.model_validate(data)
    except ValidationError as e:
        violations = _flatten(e)
        logger.warning("Invalid AI response structure: %s", violations)
        return AnalysisSchemaFailure(violations=violations)

    return AIAnalysis(
        reply_text=payload.response,
        summary=payload.summary,
        action=payload.action,
        sentiment_score=_round_half_up(payload.sentiment_score),
        tags=tuple(payload.tags),
    )
