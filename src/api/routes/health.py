"""
Health check endpoint with infrastructure checks.
"""

import time

import structlog
from fastapi import APIRouter, Depends

from src.ai.gateway import AIGateway
from src.api.dependencies import get_ai_gateway, get_database, get_rate_limiter
from src.api.models import ComponentHealth, HealthResponse
from src.ratelimit.limiter import SlidingWindowRateLimiter
from src.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    try:
        healthy = await db.health_check()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


def _check_ai(gateway: AIGateway) -> ComponentHealth:
    """Report the AI circuit breaker state without calling the model."""
    breaker = gateway.breaker
    return ComponentHealth(
        status="healthy" if gateway.available else "unhealthy",
        details={
            "configured": gateway.configured,
            "circuit_state": breaker.state.value,
            "consecutive_failures": breaker.consecutive_failures,
        },
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Check the health of the service and its dependencies.",
)
async def health_check(
    db: Database = Depends(get_database),
    gateway: AIGateway = Depends(get_ai_gateway),
    limiter: SlidingWindowRateLimiter | None = Depends(get_rate_limiter),
) -> HealthResponse:
    """
    Check service health.

    Status logic:
    - unhealthy: database is down
    - degraded: AI circuit is open (submissions fail fast)
    - healthy: all components operational
    """
    components = {
        "database": await _check_database(db),
        "ai": _check_ai(gateway),
    }

    if components["database"].status == "unhealthy":
        status = "unhealthy"
    elif components["ai"].status == "unhealthy":
        status = "degraded"
    else:
        status = "healthy"

    if status != "healthy":
        logger.warning("Health check not healthy", status=status)

    return HealthResponse(
        status=status,
        components=components,
        rate_limiter_clients=limiter.client_count if limiter is not None else None,
    )
