"""
FastAPI review service.

Provides REST API for feedback intake and reporting:
- POST /submit-review - Rate-limited, AI-analyzed review submission
- POST /generate-report - Markdown executive report over recent reviews
- GET /health - Service health check
"""

from src.api.app import create_app

__all__ = ["create_app"]
