"""Models for meal text extraction results."""

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_NAME_LENGTH = 80
# One tonne; larger masses are extraction noise and would overflow scaling.
MAX_ITEM_GRAMS = 1_000_000.0


class ExtractedItem(BaseModel):
    """Single food item parsed from meal text."""

    model_config = ConfigDict(allow_inf_nan=False)

    name: str = ""
    quantity: float | None = None
    unit: str | None = None
    grams: float = Field(default=0.0, ge=0.0, le=MAX_ITEM_GRAMS)

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value).strip()[:MAX_NAME_LENGTH]

    @field_validator("quantity", mode="before")
    @classmethod
    def _lenient_quantity(cls, value: object) -> float | None:
        # Quantity is informational only; unparseable values are dropped.
        if isinstance(value, bool) or value is None:
            return None
        try:
            quantity = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        return quantity if math.isfinite(quantity) else None

    @field_validator("unit", mode="before")
    @classmethod
    def _unit_as_text(cls, value: object) -> str | None:
        return None if value is None else str(value)

    @field_validator("grams", mode="before")
    @classmethod
    def _default_missing_grams(cls, value: object) -> object:
        return 0.0 if value is None else value


class RoughEstimate(BaseModel):
    """Model-estimated meal totals used only as a fallback."""

    model_config = ConfigDict(allow_inf_nan=False)

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    @field_validator("calories", "protein", "carbs", "fat", mode="before")
    @classmethod
    def _null_as_zero(cls, value: object) -> object:
        return 0.0 if value is None else value


class MealExtract(BaseModel):
    """Structured output of the meal extractor."""

    items: list[ExtractedItem] = Field(default_factory=list)
    estimates: RoughEstimate = Field(default_factory=RoughEstimate)

    @classmethod
    def empty(cls) -> "MealExtract":
        """Return the safe default used when model output is unusable."""
        return cls()
