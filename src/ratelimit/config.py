"""Rate limiter configuration.

All settings can be overridden via ``RATE_LIMIT_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitConfig(BaseSettings):
    """Configuration for the submission rate limiter."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(
        default=True,
        description="Enforce per-client admission control on submissions",
    )
    window_ms: int = Field(
        default=60_000,
        ge=1,
        description="Sliding window length in milliseconds",
    )
    max_requests: int = Field(
        default=5,
        ge=1,
        description="Admissions allowed per client within one window",
    )
    sweep_interval_ms: int = Field(
        default=60_000,
        ge=1,
        description="Minimum interval between idle-client eviction sweeps",
    )
