"""Ingredient catalog service."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_planner.domain.catalog import Ingredient, NutritionProfile
from meal_planner.domain.errors import IngredientNotFoundError
from meal_planner.services.food_data import FoodDataService

_logger = logging.getLogger(__name__)


class IngredientRepository(Protocol):
    """Persistence interface for catalog ingredients."""

    def list_ingredients(self) -> list[Ingredient]:
        """Return all ingredients."""

    def get_ingredients(self, ingredient_ids: set[UUID]) -> list[Ingredient]:
        """Return ingredients by id; unknown ids are ignored."""

    def search_ingredients(self, query: str, limit: int) -> list[Ingredient]:
        """Return ingredients whose name contains the query."""

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient by id, if present."""

    def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        """Create an ingredient and return it."""

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Update ingredient columns and return the ingredient."""

    def ingredient_in_use(self, ingredient_id: UUID) -> bool:
        """Return whether any meal line references the ingredient."""

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        """Delete an ingredient and the fridge items holding it."""


@dataclass
class IngredientService:
    """Application service for the ingredient catalog."""

    repository: IngredientRepository
    food_data_service: FoodDataService | None = None

    def list_ingredients(self) -> list[Ingredient]:
        """Return all ingredients sorted by name."""
        return sorted(
            self.repository.list_ingredients(), key=lambda item: item.name.lower()
        )

    def search(self, query: str | None, limit: int = 10) -> list[Ingredient]:
        """Search ingredients by name; an empty query matches nothing."""
        cleaned = (query or "").strip()
        if not cleaned:
            return []
        results = self.repository.search_ingredients(cleaned, limit)
        lowered = cleaned.lower()
        # Prefix matches first, then shorter names.
        return sorted(
            results,
            key=lambda item: (
                not item.name.lower().startswith(lowered),
                len(item.name),
            ),
        )[:limit]

    async def create_ingredient(
        self,
        name: str,
        usda_fdc_id: int | None = None,
        nutrition: NutritionProfile | None = None,
    ) -> Ingredient:
        """Create an ingredient, looking up nutrition from FDC when possible."""
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Name is required")
        if nutrition is None and usda_fdc_id is not None:
            nutrition = await self._lookup_profile(usda_fdc_id)
        payload: dict[str, object] = {"name": cleaned, "usda_fdc_id": usda_fdc_id}
        if nutrition is not None:
            payload["nutrition"] = _nutrition_payload(nutrition)
        return self.repository.create_ingredient(payload)

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient:
        """Return a single ingredient."""
        ingredient = self.repository.get_ingredient(ingredient_id)
        if ingredient is None:
            raise IngredientNotFoundError(f"Ingredient {ingredient_id} not found")
        return ingredient

    def update_ingredient(
        self,
        ingredient_id: UUID,
        name: str | None = None,
        usda_fdc_id: int | None = None,
        nutrition: NutritionProfile | None = None,
    ) -> Ingredient:
        """Change the name, FDC id or nutrition profile of an ingredient."""
        payload: dict[str, object] = {}
        if name is not None:
            if not name.strip():
                raise ValueError("Name is required")
            payload["name"] = name.strip()
        if usda_fdc_id is not None:
            payload["usda_fdc_id"] = usda_fdc_id
        if nutrition is not None:
            payload["nutrition"] = _nutrition_payload(nutrition)
        if not payload:
            raise ValueError("No fields to update")
        self.get_ingredient(ingredient_id)
        return self.repository.update_ingredient(ingredient_id, payload)

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        """Delete an ingredient unless a meal still uses it."""
        self.get_ingredient(ingredient_id)
        if self.repository.ingredient_in_use(ingredient_id):
            raise ValueError("Cannot delete ingredient that is used in meals")
        self.repository.delete_ingredient(ingredient_id)

    async def _lookup_profile(self, fdc_id: int) -> NutritionProfile | None:
        if self.food_data_service is None:
            return None
        try:
            return await self.food_data_service.get_profile(fdc_id)
        except Exception:
            _logger.exception("FDC lookup failed; storing ingredient without nutrition")
            return None


def _nutrition_payload(nutrition: NutritionProfile) -> dict[str, float | None]:
    return {
        "calories": nutrition.calories,
        "protein": nutrition.protein,
        "carbs": nutrition.carbs,
        "fat": nutrition.fat,
    }
