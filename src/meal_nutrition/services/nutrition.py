"""Nutrition service integrating USDA FDC."""

import asyncio
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from meal_nutrition.adapters.fdc_client import FdcClient
from meal_nutrition.domain.nutrition import NutrientAmounts, NutrientMatch

_NUTRIENT_IDS = {
    "calories": 1008,
    "protein": 1003,
    "carbs": 1005,
    "fat": 1004,
}

DEFAULT_DATA_TYPES = ("SR Legacy", "Foundation", "Survey (FNDDS)")

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class NutritionService:
    """Service that resolves a food name to its best FDC match."""

    fdc_client: FdcClient
    data_types: Sequence[str] = DEFAULT_DATA_TYPES
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def match(self, food_name: str) -> NutrientMatch:
        """Return the top-ranked reference food for a name, or no match.

        Lookup failures never raise: they are logged and reported as a miss.
        """
        try:
            payload = await self._call_with_retry(
                lambda: self.fdc_client.search_foods(
                    food_name, page_size=1, data_types=self.data_types
                ),
                action=f"search:{food_name}",
            )
        except Exception as exc:  # noqa: BLE001
            _logger.warning(
                "Nutrition lookup failed: query=%s status=%s error=%s",
                food_name,
                _status_code_from_exception(exc),
                type(exc).__name__,
            )
            return NutrientMatch.no_match()

        foods = payload.get("foods") if isinstance(payload, dict) else None
        if not isinstance(foods, list) or not foods or not isinstance(foods[0], dict):
            _logger.info("Nutrition lookup miss: query=%s", food_name)
            return NutrientMatch.no_match()

        food = foods[0]
        fdc_id = food.get("fdcId")
        match = NutrientMatch(
            description=str(food.get("description") or food_name),
            fdc_id=fdc_id if isinstance(fdc_id, int) else None,
            per_100g=_extract_nutrients(food.get("foodNutrients") or []),
        )
        _logger.info(
            "Nutrition lookup match: query=%s fdc_id=%s description=%s",
            food_name,
            match.fdc_id,
            match.description,
        )
        return match

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.debug(
                    "Nutrition %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _extract_nutrients(food_nutrients: object) -> NutrientAmounts:
    """Extract calories, protein, carbs, fat per 100 g; absent ids stay None."""
    values: dict[str, float | None] = dict.fromkeys(_NUTRIENT_IDS)
    if not isinstance(food_nutrients, list):
        return NutrientAmounts()
    for nutrient in food_nutrients:
        if not isinstance(nutrient, dict):
            continue
        nutrient_info = nutrient.get("nutrient")
        nutrient_id = nutrient.get("nutrientId")
        if nutrient_id is None and isinstance(nutrient_info, dict):
            nutrient_id = nutrient_info.get("id")
        amount = nutrient.get("value", nutrient.get("amount"))
        if not isinstance(amount, int | float) or isinstance(amount, bool):
            continue
        if not math.isfinite(amount):
            continue
        for key, wanted_id in _NUTRIENT_IDS.items():
            if str(nutrient_id) == str(wanted_id) and values[key] is None:
                values[key] = float(amount)

    return NutrientAmounts(**values)
