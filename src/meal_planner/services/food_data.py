"""Ingredient nutrition lookups against USDA FoodData Central."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from meal_planner.adapters.fdc_client import FdcClient
from meal_planner.domain.catalog import NutritionProfile
from meal_planner.domain.nutrition import FoodSummary
from meal_planner.services.cache import Cache

# FDC nutrient ids; amounts are per 100 g of food.
PROFILE_NUTRIENTS = {
    1008: "calories",
    1003: "protein",
    1005: "carbs",
    1004: "fat",
}

_logger = logging.getLogger(__name__)


@dataclass
class FoodDataService:
    """Cached FDC lookups returning per-100g nutrition profiles."""

    fdc_client: FdcClient
    cache: Cache
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, query: str, limit: int = 5) -> list[FoodSummary]:
        """Search generic FDC foods by name."""
        key = f"fdc-search/{limit}/{query.strip().lower()}"
        hit = self.cache.get(key)
        if isinstance(hit, list):
            return hit

        payload = await self._fetch(
            f"search '{query}'",
            lambda: self.fdc_client.search_foods(query, page_size=limit),
        )
        foods = [_to_summary(row) for row in payload.get("foods", [])]
        self.cache.set(key, foods, ttl_seconds=self.search_ttl_seconds)
        return foods

    async def get_profile(self, fdc_id: int) -> NutritionProfile:
        """Return the per-100g nutrition profile of an FDC food."""
        key = f"fdc-profile/{fdc_id}"
        hit = self.cache.get(key)
        if isinstance(hit, NutritionProfile):
            return hit

        payload = await self._fetch(
            f"food {fdc_id}", lambda: self.fdc_client.get_food(fdc_id)
        )
        profile = extract_profile(payload.get("foodNutrients", []))
        self.cache.set(key, profile, ttl_seconds=self.food_ttl_seconds)
        _logger.info("Loaded nutrition profile for FDC food %s", fdc_id)
        return profile

    async def _fetch(
        self, label: str, request: Callable[[], Awaitable[dict[str, object]]]
    ) -> dict[str, object]:
        """Run an FDC request, retrying transient failures."""
        attempts = self.retry_attempts + 1
        attempt = 1
        while True:
            try:
                return await request()
            except Exception as exc:
                _logger.warning(
                    "FDC %s failed on attempt %s of %s (%s): %s",
                    label,
                    attempt,
                    attempts,
                    _http_status(exc),
                    exc,
                )
                if attempt >= attempts:
                    raise
            await asyncio.sleep(self.retry_delay_seconds)
            attempt += 1


def _to_summary(row: dict[str, object]) -> FoodSummary:
    return FoodSummary(
        fdc_id=int(row["fdcId"]),
        description=str(row.get("description") or ""),
        data_type=row.get("dataType"),
    )


def _http_status(exc: Exception) -> str:
    status = getattr(getattr(exc, "response", None), "status_code", None)
    return f"status {status}" if isinstance(status, int) else "no status"


def extract_profile(food_nutrients: list[dict[str, object]]) -> NutritionProfile:
    """Map FDC nutrient rows to a profile; absent nutrients stay None.

    Full food records nest the id under ``nutrient``; abridged and search
    records use flat ``nutrientId``/``value`` keys.
    """
    values: dict[str, float] = {}
    for row in food_nutrients:
        nested = row.get("nutrient") or {}
        field_name = PROFILE_NUTRIENTS.get(nested.get("id") or row.get("nutrientId"))
        amount = row.get("amount", row.get("value"))
        if field_name is not None and amount is not None:
            values[field_name] = float(amount)
    return NutritionProfile(**values)
