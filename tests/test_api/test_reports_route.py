"""Tests for POST /generate-report."""

import openai


def _rows(count: int) -> list[dict]:
    return [
        {
            "review_id": f"review_{i}",
            "document": {
                "rating": 4,
                "reviewText": f"Review number {i}",
                "ai_sentiment": 70,
                "ai_tags": ["Quality"],
                "createdAt": 1_700_000_000_000 + i,
            },
        }
        for i in range(count)
    ]


def test_generates_report(client, api_database, openai_client, make_completion) -> None:
    api_database.fetch.return_value = _rows(3)
    openai_client.chat.completions.create.return_value = make_completion(
        "# Executive Intelligence Report\n\n## 1. Sentiment Velocity"
    )

    response = client.post("/generate-report")

    assert response.status_code == 200
    assert response.json() == {
        "report": "# Executive Intelligence Report\n\n## 1. Sentiment Velocity"
    }
    assert api_database.fetch.call_args.args[1] == 50
    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["temperature"] == 0.4
    assert kwargs["max_completion_tokens"] == 1000
    assert "Review number 2" in kwargs["messages"][0]["content"]


def test_empty_model_output_uses_fallback(
    client, api_database, openai_client, make_completion
) -> None:
    api_database.fetch.return_value = _rows(1)
    openai_client.chat.completions.create.return_value = make_completion("")

    response = client.post("/generate-report")

    assert response.status_code == 200
    assert response.json() == {"report": "Failed to generate report."}


def test_no_reviews(client, openai_client) -> None:
    response = client.post("/generate-report")

    assert response.status_code == 404
    assert response.json() == {"message": "No reviews found to analyze."}
    openai_client.chat.completions.create.assert_not_called()


def test_ai_failure(client, api_database, openai_client) -> None:
    api_database.fetch.return_value = _rows(2)
    openai_client.chat.completions.create.side_effect = openai.OpenAIError("down")

    response = client.post("/generate-report")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}


def test_storage_failure(client, api_database) -> None:
    api_database.fetch.side_effect = OSError("connection refused")

    response = client.post("/generate-report")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
