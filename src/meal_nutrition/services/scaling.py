"""Per-100 g to per-item nutrient scaling and output rounding."""

from decimal import ROUND_HALF_UP, Context, Decimal

from meal_nutrition.domain.nutrition import NutrientAmounts, NutrientMatch, ResolvedItem

# Wide enough to hold any finite float (up to ~1.8e308) plus decimal places.
_ROUNDING_CONTEXT = Context(prec=400)


def scale(per_100g: NutrientAmounts, grams: float) -> NutrientAmounts:
    """Scale per-100 g values to the given mass. Absent values stay absent."""
    factor = grams / 100

    def _scaled(value: float | None) -> float | None:
        return None if value is None else value * factor

    return NutrientAmounts(
        calories=_scaled(per_100g.calories),
        protein=_scaled(per_100g.protein),
        carbs=_scaled(per_100g.carbs),
        fat=_scaled(per_100g.fat),
    )


def round_half_up(value: float, places: int) -> float:
    """Round half away from zero, matching conventional nutrition labels."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(
        quantum, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT
    )
    return float(rounded)


def round_calories(value: float | None) -> int | None:
    """Round calories to a whole number."""
    if value is None:
        return None
    return int(round_half_up(value, 0))


def round_macro(value: float | None) -> float | None:
    """Round a macronutrient amount to one decimal place."""
    if value is None:
        return None
    return round_half_up(value, 1)


def to_resolved_item(
    name: str, grams: float, match: NutrientMatch, scaled: NutrientAmounts
) -> ResolvedItem:
    """Build the rounded per-item result from unrounded scaled values."""
    return ResolvedItem(
        name=name,
        grams=grams,
        source=match.description or name,
        calories=round_calories(scaled.calories),
        protein=round_macro(scaled.protein),
        carbs=round_macro(scaled.carbs),
        fat=round_macro(scaled.fat),
    )
