"""
Dependency injection for FastAPI endpoints.

Shared handles (database pool, AI gateway, rate limiter) are constructed
once in the application lifespan and stored on ``app.state``. These
providers only read them back, so tests can swap any of them through
``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from src.ai.gateway import AIGateway
from src.ratelimit.limiter import SlidingWindowRateLimiter
from src.reports.config import ReportConfig
from src.reports.job import ReportJob
from src.reviews.pipeline import SubmissionPipeline
from src.reviews.repository import ReviewRepository
from src.storage.database import Database


def get_database(request: Request) -> Database:
    """Get the process-wide database pool."""
    return request.app.state.database


def get_ai_gateway(request: Request) -> AIGateway:
    """Get the process-wide AI gateway."""
    return request.app.state.ai_gateway


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter | None:
    """Get the process-wide rate limiter (None when disabled)."""
    return request.app.state.rate_limiter


def get_report_config(request: Request) -> ReportConfig:
    """Get report settings loaded at startup."""
    return request.app.state.report_config


def get_review_repository(
    database: Database = Depends(get_database),
) -> ReviewRepository:
    """Get a review repository over the shared pool."""
    return ReviewRepository(database)


def get_submission_pipeline(
    limiter: SlidingWindowRateLimiter | None = Depends(get_rate_limiter),
    gateway: AIGateway = Depends(get_ai_gateway),
    repository: ReviewRepository = Depends(get_review_repository),
) -> SubmissionPipeline:
    """Assemble the submission pipeline from shared handles."""
    return SubmissionPipeline(limiter=limiter, gateway=gateway, repository=repository)


def get_report_job(
    gateway: AIGateway = Depends(get_ai_gateway),
    repository: ReviewRepository = Depends(get_review_repository),
    config: ReportConfig = Depends(get_report_config),
) -> ReportJob:
    """Assemble the report job from shared handles."""
    return ReportJob(gateway=gateway, repository=repository, config=config)
