"""Gateway to the generative AI service.

Two call modes share one long-lived ``openai.AsyncOpenAI`` handle:

- structured (``analyze``): the model output is constrained to
  ANALYSIS_SCHEMA via JSON-schema response format. Raw text and wall-clock
  latency are returned; parsing is left to ``src.ai.validation``.
- free-form (``summarize``): no schema, used for human-facing markdown.

Every call is bounded by ``AIConfig.timeout_seconds`` and guarded by a
circuit breaker. SDK-level retries are disabled, so a failure surfaces
immediately as AIUnavailableError.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

import openai

from src.ai.circuit_breaker import AICircuitBreaker, CircuitOpenError, CircuitState
from src.ai.config import AIConfig
from src.ai.prompts import (
    ANALYSIS_PROMPT,
    ANALYSIS_SCHEMA,
    ANALYSIS_SCHEMA_NAME,
    SYSTEM_PROMPT,
)
from src.observability.metrics import get_metrics

logger = logging.getLogger(__name__)

REPORT_FALLBACK_TEXT = "Failed to generate report."


class AIUnavailableError(Exception):
    """The AI service failed, timed out, or is behind an open circuit."""


class EmptyAIResponseError(AIUnavailableError):
    """The AI service answered but returned no text."""


@dataclass(frozen=True)
class AIResult:
    """Raw structured-mode output.

    Attributes:
        raw: Text returned by the model (expected to be JSON).
        latency_ms: Wall-clock duration of the call in milliseconds.
    """

    raw: str
    latency_ms: int


def create_openai_client(config: AIConfig) -> openai.AsyncOpenAI | None:
    """Build the process-wide OpenAI client, or None when no API key is set."""
    if not config.configured:
        return None
    return openai.AsyncOpenAI(
        api_key=config.openai_api_key.get_secret_value(),
        timeout=config.timeout_seconds,
        max_retries=0,
    )


class AIGateway:
    """Structured and free-form access to the AI model.

    Args:
        client: Shared AsyncOpenAI-compatible client (injected; fakes in tests).
            None when no API key is configured; every call then fails fast.
        config: AI configuration (model, timeout, breaker tuning).
        breaker: Optional circuit breaker (default: built from config).
    """

    def __init__(
        self,
        client: Any,
        config: AIConfig,
        breaker: AICircuitBreaker | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self._breaker = breaker or AICircuitBreaker(
            failure_threshold=config.circuit_failure_threshold,
            recovery_timeout=config.circuit_recovery_timeout,
            name="openai",
        )

    @property
    def breaker(self) -> AICircuitBreaker:
        """Access circuit breaker state."""
        return self._breaker

    @property
    def configured(self) -> bool:
        return self._client is not None

    @property
    def available(self) -> bool:
        """Whether calls are currently being let through."""
        return self._client is not None and self._breaker.state != CircuitState.OPEN

    async def analyze(self, rating: int, text: str) -> AIResult:
        """Request a schema-constrained analysis of one review.

        Args:
            rating: Validated star rating.
            text: Validated review text.

        Returns:
            AIResult with the raw model text and call latency.

        Raises:
            EmptyAIResponseError: If the model returned no text.
            AIUnavailableError: On SDK error, timeout, or open circuit.
        """
        prompt = ANALYSIS_PROMPT.format(rating=rating, review=text)
        content, latency_ms = await self._complete(
            "structured",
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": ANALYSIS_SCHEMA_NAME,
                    "schema": ANALYSIS_SCHEMA,
                    "strict": True,
                },
            },
        )
        if not content:
            get_metrics().record_ai_error("structured", "empty")
            raise EmptyAIResponseError("AI service returned no text")
        return AIResult(raw=content, latency_ms=latency_ms)

    async def summarize(
        self,
        prompt: str,
        *,
        temperature: float,
        max_output_tokens: int,
        fallback_text: str = REPORT_FALLBACK_TEXT,
    ) -> str:
        """Free-form generation for human-readable reports.

        The caller structures the output through prompt instructions alone.

        Returns:
            Generated text, or ``fallback_text`` if the model returned nothing.

        Raises:
            AIUnavailableError: On SDK error, timeout, or open circuit.
        """
        content, _latency_ms = await self._complete(
            "freeform",
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_completion_tokens=max_output_tokens,
        )
        if not content:
            logger.warning("Free-form AI call returned no text, using fallback")
            return fallback_text
        return content

    async def _complete(self, mode: str, **request: Any) -> tuple[str | None, int]:
        metrics = get_metrics()
        if self._client is None:
            metrics.record_ai_error(mode, "not_configured")
            raise AIUnavailableError("AI service is not configured")
        try:
            self._breaker.before_call()
        except CircuitOpenError as e:
            metrics.record_ai_error(mode, "circuit_open")
            raise AIUnavailableError(str(e)) from e

        start = time.perf_counter()
        try:
            async with asyncio.timeout(self._config.timeout_seconds):
                response = await self._client.chat.completions.create(
                    model=self._config.model,
                    **request,
                )
        except TimeoutError as e:
            self._breaker.record_failure()
            metrics.record_ai_error(mode, "timeout")
            logger.warning(
                "AI %s call timed out after %.1fs", mode, self._config.timeout_seconds
            )
            raise AIUnavailableError("AI call timed out") from e
        except openai.OpenAIError as e:
            self._breaker.record_failure()
            metrics.record_ai_error(mode, type(e).__name__)
            logger.warning("AI %s call failed: %s", mode, e)
            raise AIUnavailableError(f"AI call failed: {type(e).__name__}") from e

        elapsed = time.perf_counter() - start
        self._breaker.record_success()
        metrics.record_ai_latency(mode, elapsed)

        latency_ms = max(0, round(elapsed * 1000))
        if not response.choices:
            return None, latency_ms
        return response.choices[0].message.content, latency_ms
