"""Configuration for the AI gateway.

Provides Pydantic settings for the OpenAI API key, model selection, call
timeout and circuit breaker tuning. All settings can be overridden via AI_*
environment variables.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AIConfig(BaseSettings):
    """Configuration for review analysis and report generation calls.

    Example:
        AI_OPENAI_API_KEY=sk-...
        AI_MODEL=gpt-4o-mini
        AI_TIMEOUT_SECONDS=20
    """

    model_config = SettingsConfigDict(
        env_prefix="AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    openai_api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key used for both analysis and reports",
    )
    model: str = Field(
        default="gpt-4o-mini",
        description="Model used for structured analysis and free-form reports",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Upper bound on a single AI call; expiry counts as unavailable",
    )

    # Circuit breaker settings
    circuit_failure_threshold: int = Field(
        default=5,
        ge=1,
        description="Consecutive failures before opening circuit",
    )
    circuit_recovery_timeout: float = Field(
        default=60.0,
        ge=1.0,
        description="Seconds before letting a trial call through",
    )

    @property
    def configured(self) -> bool:
        """Check if an API key is available."""
        return self.openai_api_key is not None
