"""Pydantic models for the meal parsing endpoint."""

from pydantic import BaseModel

from meal_nutrition.domain.nutrition import MealResolution


class ParseMealRequest(BaseModel):
    """Meal parsing request payload."""

    query: str | None = None


class ResolvedItemPayload(BaseModel):
    """Single resolved item in the response."""

    name: str
    grams: float
    source: str
    calories: int | None
    protein: float | None
    carbs: float | None
    fat: float | None


class ParseMealResponse(BaseModel):
    """Per-item breakdown with flattened meal totals."""

    items: list[ResolvedItemPayload]
    calories: int
    protein: float
    carbs: float
    fat: float
    note: str | None = None

    @classmethod
    def from_resolution(cls, resolution: MealResolution) -> "ParseMealResponse":
        """Build the response payload from a pipeline result."""
        totals = resolution.totals
        return cls(
            items=[
                ResolvedItemPayload(
                    name=item.name,
                    grams=item.grams,
                    source=item.source,
                    calories=item.calories,
                    protein=item.protein,
                    carbs=item.carbs,
                    fat=item.fat,
                )
                for item in resolution.items
            ],
            calories=totals.calories,
            protein=totals.protein,
            carbs=totals.carbs,
            fat=totals.fat,
            note=totals.note,
        )

    def to_payload(self) -> dict[str, object]:
        """Serialize to JSON-ready data; note is omitted unless present."""
        payload = self.model_dump()
        if payload["note"] is None:
            payload.pop("note")
        return payload
