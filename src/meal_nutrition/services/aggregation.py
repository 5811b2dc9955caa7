"""Meal totals aggregation with model-estimate fallback."""

import logging
from collections.abc import Iterable

from meal_nutrition.domain.extraction import RoughEstimate
from meal_nutrition.domain.nutrition import MealTotals, NutrientAmounts
from meal_nutrition.services.scaling import round_half_up

ESTIMATED_TOTALS_NOTE = "Totals estimated by model (USDA match not found)"

_logger = logging.getLogger(__name__)


def sum_nutrients(amounts: Iterable[NutrientAmounts]) -> NutrientAmounts:
    """Sum unrounded amounts; absent values count as zero."""
    calories = protein = carbs = fat = 0.0
    for amount in amounts:
        calories += amount.calories or 0.0
        protein += amount.protein or 0.0
        carbs += amount.carbs or 0.0
        fat += amount.fat or 0.0
    return NutrientAmounts(calories=calories, protein=protein, carbs=carbs, fat=fat)


def aggregate(
    amounts: Iterable[NutrientAmounts], estimate: RoughEstimate
) -> MealTotals:
    """Compute rounded meal totals from unrounded per-item amounts.

    When no item contributed any calories and the model supplied a positive
    calorie estimate, the model's rough totals are returned with a note.
    """
    summed = sum_nutrients(amounts)
    if summed.calories == 0 and estimate.calories > 0:
        _logger.info(
            "Falling back to model estimates: calories=%s", estimate.calories
        )
        return _rounded_totals(
            NutrientAmounts(
                calories=estimate.calories,
                protein=estimate.protein,
                carbs=estimate.carbs,
                fat=estimate.fat,
            ),
            note=ESTIMATED_TOTALS_NOTE,
        )
    return _rounded_totals(summed)


def _rounded_totals(amounts: NutrientAmounts, note: str | None = None) -> MealTotals:
    return MealTotals(
        calories=int(round_half_up(amounts.calories or 0.0, 0)),
        protein=round_half_up(amounts.protein or 0.0, 1),
        carbs=round_half_up(amounts.carbs or 0.0, 1),
        fat=round_half_up(amounts.fat or 0.0, 1),
        note=note,
    )
