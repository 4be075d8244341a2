"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.ai.config import AIConfig
from src.ai.gateway import AIGateway, create_openai_client
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.timeout import TimeoutMiddleware
from src.api.models import SubmitReviewError
from src.api.routes import health, reports, reviews
from src.config.settings import get_settings
from src.ratelimit.config import RateLimitConfig
from src.ratelimit.limiter import SlidingWindowRateLimiter
from src.reports.config import ReportConfig
from src.storage.database import Database

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Builds every shared handle exactly once from explicit configuration and
    parks it on ``app.state``; request handlers never create them lazily.
    """
    logger.info("Review API starting up")

    ai_config = AIConfig()
    openai_client = create_openai_client(ai_config)
    if openai_client is None:
        logger.warning("AI_OPENAI_API_KEY is not set; starting degraded, AI calls will fail")

    rate_limit_config = RateLimitConfig()
    database = Database()

    try:
        await database.connect()

        app.state.database = database
        app.state.ai_gateway = AIGateway(openai_client, ai_config)
        app.state.rate_limiter = (
            SlidingWindowRateLimiter.from_config(rate_limit_config)
            if rate_limit_config.enabled
            else None
        )
        app.state.report_config = ReportConfig()

        yield
    finally:
        logger.info("Review API shutting down")
        if openai_client is not None:
            await openai_client.close()
        await database.close()


def create_app(use_lifespan: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        use_lifespan: Build shared handles on startup. Tests pass False and
            provide fakes through ``dependency_overrides``.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "reviews", "description": "Customer review submission and AI analysis"},
        {"name": "reports", "description": "Executive reports over recent reviews"},
    ]

    app = FastAPI(
        title="Review Pulse API",
        description="""
API for collecting customer reviews, analyzing them with a generative model,
and summarizing recent feedback into executive reports.

## Limits

`POST /submit-review` is limited to 5 requests per client per minute.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan if use_lifespan else None,
        openapi_tags=openapi_tags,
    )

    # Add CORS middleware (origins from CORS_ORIGINS env var, comma-separated)
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Timeout sits inside the request context so 504s are still logged
    if settings.request_timeout_seconds > 0:
        app.add_middleware(
            TimeoutMiddleware,
            timeout_seconds=settings.request_timeout_seconds,
        )
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=SubmitReviewError(error="Internal server error").model_dump(exclude_none=True),
        )

    # Include routers
    app.include_router(reviews.router, tags=["reviews"])
    app.include_router(reports.router, tags=["reports"])
    app.include_router(health.router, tags=["health"])

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "Review Pulse API",
            "version": "0.1.0",
            "docs": "/docs",
        }

    return app
