"""Structural and range validation of incoming review submissions."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.reviews.schemas import (
    MAX_RATING,
    MAX_REVIEW_LENGTH,
    MIN_RATING,
    MIN_REVIEW_LENGTH,
    ReviewSubmission,
)


class InvalidSubmissionError(ValueError):
    """Raised when a submission fails validation.

    Attributes:
        field_errors: Every violated field mapped to its messages.
    """

    def __init__(self, field_errors: dict[str, list[str]]) -> None:
        self.field_errors = field_errors
        fields = ", ".join(sorted(field_errors))
        super().__init__(f"Invalid submission fields: {fields}")


class ReviewForm(BaseModel):
    """Wire shape of ``POST /submit-review``: ``{rating, review}``."""

    model_config = ConfigDict(extra="ignore")

    # strict: booleans and floats are not ratings
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING, strict=True)
    review: str = Field(
        min_length=MIN_REVIEW_LENGTH,
        max_length=MAX_REVIEW_LENGTH,
        strict=True,
    )


def _field_errors(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        key = ".".join(str(part) for part in err["loc"]) or "body"
        errors.setdefault(key, []).append(err["msg"])
    return errors


def validate_submission(raw: Any) -> ReviewSubmission:
    """Validate a decoded request body.

    All violations are collected, not just the first.

    Args:
        raw: Decoded JSON body (expected to be an object).

    Returns:
        The validated ReviewSubmission.

    Raises:
        InvalidSubmissionError: If any field is missing or out of range.
    """
    try:
        form = ReviewForm.model_validate(raw)
    except ValidationError as e:
        raise InvalidSubmissionError(_field_errors(e)) from e
    return ReviewSubmission(rating=form.rating, text=form.review)
