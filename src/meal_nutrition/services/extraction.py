"""Meal text extraction service using LLMs."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from meal_nutrition.domain.extraction import ExtractedItem, MealExtract, RoughEstimate
from meal_nutrition.services.json_blocks import JsonBlockError, load_json_block

EXTRACTION_INSTRUCTIONS = (
    "You are a nutrition parsing engine. Convert a natural language meal into "
    "a JSON object with normalized grams per item. All quantities must be "
    "expressed in grams. When the meal is unclear or ambiguous, estimate grams "
    "conservatively.\n"
    "IMPORTANT: Return ONLY valid JSON."
)

EXTRACTION_EXAMPLE: dict[str, object] = {
    "items": [
        {"name": "chicken breast, cooked", "quantity": 1, "unit": "piece", "grams": 120},
        {"name": "white rice, cooked", "quantity": 1, "unit": "cup", "grams": 158},
        {"name": "avocado", "quantity": 0.5, "unit": "fruit", "grams": 75},
    ],
    "estimates": {"calories": 0, "protein": 0, "carbs": 0, "fat": 0},
}

_EXCERPT_LENGTH = 200

_logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Interface for generative text completion."""

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
        """Return the model's free-text answer."""


@dataclass
class ExtractionService:
    """Service that prompts the model and tolerantly parses its answer."""

    client: CompletionClient
    model: str
    temperature: float | None = 0.2
    reasoning_effort: str | None = None
    store: bool = False

    async def extract(self, text: str) -> MealExtract:
        """Extract food items and rough totals from meal text.

        The model is called exactly once. Errors from the call itself propagate;
        unparseable output degrades to an empty extraction.
        """
        raw = await self.client.complete(
            model=self.model,
            instructions=EXTRACTION_INSTRUCTIONS,
            prompt=build_prompt(text),
            temperature=self.temperature,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
        )
        return parse_extraction(raw)


def build_prompt(text: str) -> str:
    """Build the user prompt embedding the meal text and the expected shape."""
    example = json.dumps(EXTRACTION_EXAMPLE, indent=2)
    return (
        f'Meal: "{text}"\n'
        "Return JSON exactly like this example (keys & types), no prose. "
        "The estimates object holds rough totals for the whole meal.\n"
        f"{example}"
    )


def parse_extraction(raw: str) -> MealExtract:
    """Parse model output into a MealExtract, degrading to an empty one."""
    try:
        payload = load_json_block(raw)
    except JsonBlockError as exc:
        _logger.warning(
            "Extraction degraded: %s; output=%r", exc, raw[:_EXCERPT_LENGTH]
        )
        return MealExtract.empty()
    if not isinstance(payload, dict):
        _logger.warning("Extraction degraded: top-level JSON is not an object")
        return MealExtract.empty()

    return MealExtract(
        items=_parse_items(payload.get("items")),
        estimates=_parse_estimates(payload.get("estimates")),
    )


def _parse_items(raw_items: object) -> list[ExtractedItem]:
    """Validate items one by one, dropping malformed entries."""
    if not isinstance(raw_items, list):
        return []
    items: list[ExtractedItem] = []
    for raw_item in raw_items:
        if not isinstance(raw_item, dict):
            continue
        try:
            items.append(ExtractedItem.model_validate(raw_item))
        except ValidationError:
            _logger.info("Dropping malformed extracted item: %r", raw_item)
    return items


def _parse_estimates(raw_estimates: object) -> RoughEstimate:
    """Validate rough totals, falling back to all-zero values."""
    if not isinstance(raw_estimates, dict):
        return RoughEstimate()
    try:
        return RoughEstimate.model_validate(raw_estimates)
    except ValidationError:
        return RoughEstimate()
