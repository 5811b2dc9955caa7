"""Meal resolution pipeline: extraction, lookup, scaling and totals."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from meal_nutrition.domain.errors import ConfigurationError
from meal_nutrition.domain.extraction import ExtractedItem, MealExtract
from meal_nutrition.domain.nutrition import (
    MealQuery,
    MealResolution,
    NutrientAmounts,
    NutrientMatch,
    ResolvedItem,
)
from meal_nutrition.services.aggregation import aggregate
from meal_nutrition.services.scaling import scale, to_resolved_item

_logger = logging.getLogger(__name__)


class TextExtractor(Protocol):
    """Capability that turns meal text into candidate items."""

    async def extract(self, text: str) -> MealExtract:
        """Return extracted items and rough totals."""


class NutrientSource(Protocol):
    """Capability that resolves a food name to per-100 g nutrients."""

    async def match(self, food_name: str) -> NutrientMatch:
        """Return the best match or a no-match result."""


@dataclass
class MealResolutionService:
    """Orchestrates one meal query from text to totals."""

    extractor: TextExtractor
    nutrient_source: NutrientSource
    missing_credentials: Sequence[str] = ()
    lookup_concurrency: int = 4

    async def resolve_meal(self, raw_query: object) -> MealResolution:
        """Resolve free-form meal text into per-item nutrients and totals.

        Raises InvalidInputError for a blank query and ConfigurationError when
        a credential is missing. Both checks run before any external call.
        """
        query = MealQuery.from_raw(raw_query)
        self._ensure_configured()

        extract = await self.extractor.extract(query.text)
        candidates = [item for item in extract.items if _is_usable(item)]
        dropped = len(extract.items) - len(candidates)
        if dropped:
            _logger.info("Dropped %s extracted items without name or grams", dropped)

        matches = await self._match_all(candidates)
        _logger.info(
            "Matched %s of %s items against the nutrient database",
            sum(match.found for match in matches),
            len(matches),
        )

        items: list[ResolvedItem] = []
        amounts: list[NutrientAmounts] = []
        for candidate, match in zip(candidates, matches, strict=True):
            scaled = scale(match.per_100g, candidate.grams)
            items.append(to_resolved_item(candidate.name, candidate.grams, match, scaled))
            amounts.append(scaled)

        return MealResolution(items=items, totals=aggregate(amounts, extract.estimates))

    def _ensure_configured(self) -> None:
        if self.missing_credentials:
            raise ConfigurationError(f"{self.missing_credentials[0]} not set")

    async def _match_all(self, candidates: list[ExtractedItem]) -> list[NutrientMatch]:
        """Look up candidates concurrently; results keep extraction order."""
        semaphore = asyncio.Semaphore(max(1, self.lookup_concurrency))

        async def _match_one(candidate: ExtractedItem) -> NutrientMatch:
            async with semaphore:
                return await self._safe_match(candidate.name)

        return list(await asyncio.gather(*(_match_one(c) for c in candidates)))

    async def _safe_match(self, food_name: str) -> NutrientMatch:
        """Isolate a single item's lookup failure from the rest of the meal."""
        try:
            return await self.nutrient_source.match(food_name)
        except Exception:  # noqa: BLE001
            _logger.warning("Lookup raised for %s; treating as no match", food_name)
            return NutrientMatch.no_match()


def _is_usable(item: ExtractedItem) -> bool:
    return item.grams > 0 and bool(item.name)
