"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from meal_nutrition.adapters.fdc_client import HttpxFdcClient
from meal_nutrition.adapters.openai_completion_client import OpenAICompletionClient
from meal_nutrition.config import Settings, parse_data_types
from meal_nutrition.services.extraction import ExtractionService
from meal_nutrition.services.meals import MealResolutionService
from meal_nutrition.services.nutrition import DEFAULT_DATA_TYPES, NutritionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    extraction_service: ExtractionService
    nutrition_service: NutritionService
    meal_service: MealResolutionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    # Missing keys are reported per request by MealResolutionService before
    # any external call, so clients are built with an empty key here.
    completion_client = OpenAICompletionClient.create(
        resolved_settings.openai_api_key or "",
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    extraction_service = ExtractionService(
        client=completion_client,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key or "",
        base_url=resolved_settings.fdc_base_url,
        timeout_seconds=resolved_settings.fdc_timeout_seconds,
    )
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        data_types=parse_data_types(resolved_settings.fdc_data_types)
        or DEFAULT_DATA_TYPES,
        retry_attempts=resolved_settings.lookup_retry_attempts,
        retry_delay_seconds=resolved_settings.lookup_retry_delay_seconds,
    )
    meal_service = MealResolutionService(
        extractor=extraction_service,
        nutrient_source=nutrition_service,
        missing_credentials=tuple(resolved_settings.missing_credentials()),
        lookup_concurrency=resolved_settings.lookup_concurrency,
    )

    async def close_resources() -> None:
        await completion_client.close()
        await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        extraction_service=extraction_service,
        nutrition_service=nutrition_service,
        meal_service=meal_service,
        close_resources=close_resources,
    )
