"""Tests for the application lifespan: startup wiring and shutdown cleanup."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.ai.config import AIConfig
from src.api.app import create_app
from src.storage.database import StorageError


@pytest.fixture
def lifespan_db(monkeypatch):
    """Mock Database handed to the lifespan in place of a real pool."""
    db = AsyncMock()
    db.health_check = AsyncMock(return_value=True)
    monkeypatch.setattr("src.api.app.Database", lambda: db)
    return db


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("AI_OPENAI_API_KEY", raising=False)
    monkeypatch.setattr("src.api.app.AIConfig", lambda: AIConfig(_env_file=None))


class TestLifespanWithoutAPIKey:
    def test_starts_degraded(self, lifespan_db, no_api_key) -> None:
        with TestClient(create_app()) as client:
            data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["components"]["ai"]["status"] == "unhealthy"
        assert data["components"]["ai"]["details"]["configured"] is False

    def test_submission_reports_ai_unavailable(self, lifespan_db, no_api_key) -> None:
        with TestClient(create_app()) as client:
            response = client.post(
                "/submit-review", json={"rating": 4, "review": "Quick delivery"}
            )

        assert response.status_code == 500
        assert response.json()["error"] == "AI service unavailable"
        lifespan_db.fetchval.assert_not_awaited()

    def test_closes_database_on_shutdown(self, lifespan_db, no_api_key) -> None:
        with TestClient(create_app()):
            lifespan_db.connect.assert_awaited_once()
            lifespan_db.close.assert_not_awaited()

        lifespan_db.close.assert_awaited_once()


class TestLifespanStartupFailure:
    def test_connect_failure_still_closes(self, lifespan_db, no_api_key) -> None:
        lifespan_db.connect.side_effect = StorageError("Failed to connect to database")

        with pytest.raises(StorageError):
            with TestClient(create_app()):
                pass

        lifespan_db.close.assert_awaited_once()

    def test_connect_failure_closes_openai_client(self, lifespan_db, monkeypatch) -> None:
        openai_client = AsyncMock()
        monkeypatch.setattr("src.api.app.create_openai_client", lambda config: openai_client)
        lifespan_db.connect.side_effect = StorageError("Failed to connect to database")

        with pytest.raises(StorageError):
            with TestClient(create_app()):
                pass

        openai_client.close.assert_awaited_once()
