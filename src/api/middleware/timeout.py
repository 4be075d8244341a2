"""
Request timeout middleware.

Bounds the total duration of each request, returning 504 once the budget is
spent. The AI gateway has its own, shorter per-call timeout; this is the
outer limit covering storage and everything else in the request.
"""

import asyncio

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

DEFAULT_EXCLUDED_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Enforce a maximum request duration, returning 504 on timeout."""

    def __init__(
        self,
        app,
        timeout_seconds: float = 60.0,
        excluded_paths: tuple[str, ...] = DEFAULT_EXCLUDED_PATHS,
    ):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.excluded_paths = excluded_paths

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.excluded_paths):
            return await call_next(request)

        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await call_next(request)
        except TimeoutError:
            logger.warning(
                "Request timed out",
                path=request.url.path,
                method=request.method,
                timeout_seconds=self.timeout_seconds,
            )
            return JSONResponse(
                status_code=504,
                content={
                    "success": False,
                    "error": "Request timed out",
                    "timeout_seconds": self.timeout_seconds,
                },
            )
