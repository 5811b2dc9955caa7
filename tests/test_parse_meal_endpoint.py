"""Tests for the meal parsing endpoint."""

import json

from fastapi.testclient import TestClient

from meal_nutrition.adapters.openai_completion_client import OpenAICompletionClient
from meal_nutrition.api.app import create_app
from meal_nutrition.containers import AppContainer
from meal_nutrition.services.aggregation import ESTIMATED_TOTALS_NOTE
from meal_nutrition.services.extraction import ExtractionService
from meal_nutrition.services.meals import MealResolutionService
from tests.conftest import FakeCompletionClient, FakeFdcClient, FakeOpenAISdk


def test_parse_meal_returns_items_and_totals(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/api/parse-meal", json={"query": "2 eggs, 1 banana"})

    assert response.status_code == 200
    data = response.json()
    assert [item["name"] for item in data["items"]] == ["egg", "banana"]
    assert data["items"][0]["source"] == "Egg, whole, raw, fresh"
    assert data["calories"] == 248
    assert data["protein"] == 13.9
    assert "note" not in data


def test_parse_meal_fallback_includes_note(
    container: AppContainer,
    completion_client: FakeCompletionClient,
) -> None:
    completion_client.output = json.dumps(
        {
            "items": [{"name": "mystery energy bar", "grams": 40}],
            "estimates": {"calories": 180, "protein": 5, "carbs": 24, "fat": 7},
        }
    )
    client = TestClient(create_app(container))

    response = client.post("/api/parse-meal", json={"query": "mystery energy bar"})

    assert response.status_code == 200
    data = response.json()
    assert data["items"][0]["calories"] is None
    assert data["items"][0]["fat"] is None
    assert data["calories"] == 180
    assert data["note"] == ESTIMATED_TOTALS_NOTE


def test_blank_query_is_400_without_external_calls(
    container: AppContainer,
    completion_client: FakeCompletionClient,
    fdc_client: FakeFdcClient,
) -> None:
    client = TestClient(create_app(container))

    for body in ({"query": "  "}, {}, {"query": 42}):
        response = client.post("/api/parse-meal", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing query"}

    assert completion_client.calls == []
    assert fdc_client.queries == []


def test_non_json_body_is_400(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/api/parse-meal",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert "error" in response.json()


def test_non_post_method_is_405(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/api/parse-meal")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


def test_missing_credential_is_500(
    container: AppContainer,
    completion_client: FakeCompletionClient,
) -> None:
    container.meal_service = MealResolutionService(
        extractor=container.extraction_service,
        nutrient_source=container.nutrition_service,
        missing_credentials=("FDC_API_KEY",),
    )
    client = TestClient(create_app(container))

    response = client.post("/api/parse-meal", json={"query": "2 eggs"})

    assert response.status_code == 500
    assert response.json() == {"error": "FDC_API_KEY not set"}
    assert completion_client.calls == []


def test_unexpected_failure_is_generic_500(
    container: AppContainer,
    completion_client: FakeCompletionClient,
) -> None:
    completion_client.error = RuntimeError("secret internal detail")
    client = TestClient(create_app(container))

    response = client.post("/api/parse-meal", json={"query": "2 eggs"})

    assert response.status_code == 500
    assert response.json() == {"error": "Server error"}
    assert "secret" not in response.text


def test_identical_requests_give_identical_bytes(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    first = client.post("/api/parse-meal", json={"query": "2 eggs, 1 banana"})
    second = client.post("/api/parse-meal", json={"query": "2 eggs, 1 banana"})

    assert first.content == second.content


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.json() == {"status": "ok"}


def test_empty_model_answer_returns_empty_meal(
    container: AppContainer,
    fdc_client: FakeFdcClient,
) -> None:
    extraction_service = ExtractionService(
        client=OpenAICompletionClient(client=FakeOpenAISdk("")),
        model="gpt-4o-mini",
    )
    container.meal_service = MealResolutionService(
        extractor=extraction_service,
        nutrient_source=container.nutrition_service,
    )
    client = TestClient(create_app(container))

    response = client.post("/api/parse-meal", json={"query": "toast"})

    assert response.status_code == 200
    assert response.json() == {
        "items": [],
        "calories": 0,
        "protein": 0.0,
        "carbs": 0.0,
        "fat": 0.0,
    }
    assert fdc_client.queries == []


def test_head_and_options_are_405(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    head = client.head("/api/parse-meal")
    options = client.options("/api/parse-meal")

    assert head.status_code == 405
    assert options.status_code == 405
    assert options.json() == {"error": "Method not allowed"}


def test_framework_405_uses_same_message(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/health")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
