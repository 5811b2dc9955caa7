"""Nutrition domain models."""

from dataclasses import dataclass

from meal_nutrition.domain.errors import InvalidInputError


@dataclass(frozen=True)
class NutrientAmounts:
    """Calories and macronutrients; a field is None when its source was absent."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None


@dataclass(frozen=True)
class NutrientMatch:
    """Best database match for a food name with nutrients per 100 g."""

    description: str | None = None
    fdc_id: int | None = None
    per_100g: NutrientAmounts = NutrientAmounts()

    @property
    def found(self) -> bool:
        """Whether the database returned a record."""
        return self.description is not None

    @classmethod
    def no_match(cls) -> "NutrientMatch":
        """Return a match with every nutrient absent."""
        return cls()


@dataclass(frozen=True)
class ResolvedItem:
    """Per-item result with rounded nutrients for the response."""

    name: str
    grams: float
    source: str
    calories: int | None
    protein: float | None
    carbs: float | None
    fat: float | None


@dataclass(frozen=True)
class MealTotals:
    """Rounded meal totals."""

    calories: int
    protein: float
    carbs: float
    fat: float
    note: str | None = None


@dataclass(frozen=True)
class MealResolution:
    """Per-item breakdown plus totals for one meal query."""

    items: list[ResolvedItem]
    totals: MealTotals


@dataclass(frozen=True)
class MealQuery:
    """Free-form meal description submitted by a user."""

    text: str

    @classmethod
    def from_raw(cls, raw: object) -> "MealQuery":
        """Validate a raw query value and return a trimmed query."""
        if not isinstance(raw, str) or not raw.strip():
            raise InvalidInputError("Missing query")
        return cls(text=raw.strip())
