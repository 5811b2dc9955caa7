"""Shared test fixtures."""

import json
from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from meal_nutrition.adapters.fdc_client import FdcClient
from meal_nutrition.config import Settings
from meal_nutrition.containers import AppContainer
from meal_nutrition.services.extraction import CompletionClient, ExtractionService
from meal_nutrition.services.meals import MealResolutionService
from meal_nutrition.services.nutrition import NutritionService


def fdc_food(
    description: str,
    calories: float | None = None,
    protein: float | None = None,
    carbs: float | None = None,
    fat: float | None = None,
    fdc_id: int = 1000,
) -> dict[str, object]:
    """Build a search-format FDC food record with per-100 g nutrients."""
    nutrients = []
    for nutrient_id, value in (
        (1008, calories),
        (1003, protein),
        (1005, carbs),
        (1004, fat),
    ):
        if value is not None:
            nutrients.append({"nutrientId": nutrient_id, "value": value})
    return {
        "fdcId": fdc_id,
        "description": description,
        "dataType": "SR Legacy",
        "foodNutrients": nutrients,
    }


EGG = fdc_food("Egg, whole, raw, fresh", 143, 12.6, 0.72, 9.51, fdc_id=171287)
BANANA = fdc_food("Bananas, raw", 89, 1.09, 22.8, 0.33, fdc_id=173944)


@dataclass
class FakeCompletionClient(CompletionClient):
    """Fake completion client returning a fixed answer."""

    output: str = field(
        default_factory=lambda: json.dumps(
            {
                "items": [
                    {"name": "egg", "quantity": 2, "unit": "large", "grams": 100},
                    {"name": "banana", "quantity": 1, "unit": "medium", "grams": 118},
                ],
                "estimates": {"calories": 250, "protein": 14, "carbs": 28, "fat": 10},
            }
        )
    )
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        instructions: str,
        prompt: str,
        temperature: float | None,
        reasoning_effort: str | None,
        store: bool,
    ) -> str:
        self.calls.append({"model": model, "instructions": instructions, "prompt": prompt})
        if self.error is not None:
            raise self.error
        return self.output


class _FakeResponses:
    def __init__(self, output_text: str | None) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class FakeOpenAISdk:
    """Stand-in for AsyncOpenAI exposing only the Responses API."""

    def __init__(self, output_text: str | None = '{"items": []}') -> None:
        self.responses = _FakeResponses(output_text)

    async def close(self) -> None:
        return None


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client keyed by query text; unknown queries return no foods."""

    foods: dict[str, dict[str, object]] = field(
        default_factory=lambda: {"egg": EGG, "banana": BANANA}
    )
    errors: dict[str, Exception] = field(default_factory=dict)
    queries: list[str] = field(default_factory=list)
    last_data_types: Sequence[str] = ()

    async def search_foods(
        self,
        query: str,
        page_size: int = 1,
        data_types: Sequence[str] = (),
    ) -> dict[str, object]:
        self.queries.append(query)
        self.last_data_types = data_types
        if query in self.errors:
            raise self.errors[query]
        food = self.foods.get(query)
        return {"foods": [food] if food else []}


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key", fdc_api_key="fdc-key")


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def container(
    settings: Settings,
    completion_client: FakeCompletionClient,
    fdc_client: FakeFdcClient,
) -> AppContainer:
    extraction_service = ExtractionService(
        client=completion_client, model=settings.openai_model
    )
    nutrition_service = NutritionService(
        fdc_client=fdc_client, retry_attempts=0, retry_delay_seconds=0
    )
    meal_service = MealResolutionService(
        extractor=extraction_service,
        nutrient_source=nutrition_service,
        missing_credentials=tuple(settings.missing_credentials()),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        extraction_service=extraction_service,
        nutrition_service=nutrition_service,
        meal_service=meal_service,
        close_resources=close_resources,
    )
