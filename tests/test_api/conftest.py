"""Shared fixtures for API tests."""

import json

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.dependencies import (
    get_ai_gateway,
    get_database,
    get_rate_limiter,
    get_report_config,
)
from src.ratelimit.limiter import SlidingWindowRateLimiter
from src.reports.config import ReportConfig

ANALYSIS = {
    "response": "Thank you, we're glad the team could help!",
    "summary": "Helpful support team",
    "action": "Recognize the support agent",
    "sentiment_score": 91.6,
    "tags": ["Service"],
}


@pytest.fixture
def analysis_json() -> str:
    """Well-formed structured model output."""
    return json.dumps(ANALYSIS)


@pytest.fixture
def api_database(mock_database):
    """Mock database whose inserts echo back the generated review id."""
    mock_database.fetchval.side_effect = lambda sql, review_id, doc: review_id
    return mock_database


@pytest.fixture
def limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(window_ms=60_000, max_requests=5)


@pytest.fixture
def client(api_database, gateway, limiter):
    """FastAPI TestClient with dependency overrides."""
    app = create_app(use_lifespan=False)

    app.dependency_overrides[get_database] = lambda: api_database
    app.dependency_overrides[get_ai_gateway] = lambda: gateway
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_report_config] = lambda: ReportConfig()

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
