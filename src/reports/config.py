"""Report job configuration.

All settings can be overridden via ``REPORT_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.ai.gateway import REPORT_FALLBACK_TEXT


class ReportConfig(BaseSettings):
    """Configuration for the executive report job."""

    model_config = SettingsConfigDict(
        env_prefix="REPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    max_records: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Most recent reviews included in one report",
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=2.0,
        description="Sampling temperature; kept low for analytical consistency",
    )
    max_output_tokens: int = Field(
        default=1000,
        ge=100,
        description="Output budget that keeps the report short",
    )
    fallback_text: str = Field(
        default=REPORT_FALLBACK_TEXT,
        description="Returned verbatim when the model produces no text",
    )
