"""
Request correlation and access logging.

Each request gets an id (from X-Request-ID / X-Correlation-ID, or a new
UUID). The id and the rate-limit client identity are bound into the logging
context for the lifetime of the request, and the id is echoed back on the
response so callers can quote it.
"""

import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.rate_limit import get_client_id
from src.observability.logging import bind_context, clear_context

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _request_id(request: Request) -> str:
    return (
        request.headers.get(REQUEST_ID_HEADER)
        or request.headers.get("X-Correlation-ID")
        or str(uuid.uuid4())
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request_id/client_id to logs and emit one access line per request."""

    async def dispatch(self, request: Request, call_next):
        request_id = _request_id(request)
        bind_context(request_id=request_id, client_id=get_client_id(request))
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            return response
        finally:
            clear_context()
