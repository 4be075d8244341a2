"""
Structured logging configuration using structlog.

Domain modules log through the standard library (``logging.getLogger``)
with %-style messages; the API layer logs through structlog with keyword
fields. Both end up in one ProcessorFormatter so every line has the same
shape: JSON in production, colored console output in development.

Request-scoped fields (request_id, client_id) are bound through
contextvars by the request middleware and merged into every line.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from src.config.settings import get_settings

SERVICE_NAME = "review-pulse"

# Values under these keys never reach a log line
REDACTED_KEYS = frozenset({"api_key", "openai_api_key", "authorization", "password"})

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "asyncio")


def add_service(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def redact_secrets(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def setup_logging() -> None:
    """
    Configure structlog and route stdlib logging through it.

    Safe to call more than once; the root handler is replaced, not stacked.

    Usage:
        setup_logging()
        logger = structlog.get_logger()
        logger.info("Review stored", review_id="review_123", latency_ms=840)
    """
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_service,
        redact_secrets,
    ]

    if settings.is_production:
        renderers: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.effective_log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs) -> None:
    """
    Bind context variables to all subsequent log messages.

    Args:
        **kwargs: Key-value pairs to bind
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
