"""AI gateway for review analysis and report generation.

Schema-constrained analysis of single reviews plus free-form markdown
generation, both over one shared OpenAI client guarded by a circuit breaker.

Usage:
    from src.ai import AIConfig, AIGateway, create_openai_client, validate_analysis

    config = AIConfig()
    gateway = AIGateway(create_openai_client(config), config)
    result = await gateway.analyze(rating=5, text="Great service!")
    analysis = validate_analysis(result.raw)
"""

from src.ai.circuit_breaker import AICircuitBreaker, CircuitOpenError, CircuitState
from src.ai.config import AIConfig
from src.ai.gateway import (
    REPORT_FALLBACK_TEXT,
    AIGateway,
    AIResult,
    AIUnavailableError,
    EmptyAIResponseError,
    create_openai_client,
)
from src.ai.validation import (
    AnalysisParseFailure,
    AnalysisSchemaFailure,
    validate_analysis,
)

__all__ = [
    "AICircuitBreaker",
    "AIConfig",
    "AIGateway",
    "AIResult",
    "AIUnavailableError",
    "AnalysisParseFailure",
    "AnalysisSchemaFailure",
    "CircuitOpenError",
    "CircuitState",
    "EmptyAIResponseError",
    "REPORT_FALLBACK_TEXT",
    "create_openai_client",
    "validate_analysis",
]
