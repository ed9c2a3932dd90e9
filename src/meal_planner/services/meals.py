"""Meal catalog service."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from meal_planner.domain.catalog import Meal, QuantityLine
from meal_planner.domain.errors import MealNotFoundError
from meal_planner.domain.nutrition import NutritionTotals
from meal_planner.domain.recommendations import RecommendedMeal
from meal_planner.services.coverage import calculate_coverage
from meal_planner.services.fridge import FridgeService
from meal_planner.services.ingredients import IngredientRepository
from meal_planner.services.nutrition import aggregate_nutrition, meal_nutrition

SORT_OPTIONS = {"name", "created", "coverage"}
EDITABLE_FIELDS = ("name", "description", "instructions", "prep_time", "cook_time")

_logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for meals and their ingredient lines."""

    def list_meals(self) -> list[Meal]:
        """Return all meals with resolved ingredient lines."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal with resolved ingredient lines, if present."""

    def get_meals(self, meal_ids: set[UUID]) -> list[Meal]:
        """Return meals by id with unresolved ingredient lines."""

    def create_meal(
        self, payload: dict[str, object], lines: list[QuantityLine]
    ) -> Meal:
        """Create a meal with its lines and return it."""

    def update_meal(self, meal_id: UUID, payload: dict[str, object]) -> Meal:
        """Update meal columns and return the meal with resolved lines."""

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal and its lines."""

    def add_ingredient(self, meal_id: UUID, line: QuantityLine) -> None:
        """Attach an ingredient line to a meal."""

    def remove_ingredient(self, meal_id: UUID, ingredient_id: UUID) -> None:
        """Detach an ingredient from a meal."""


@dataclass(frozen=True)
class MealView:
    """Meal with derived nutrition and fridge coverage."""

    meal: Meal
    nutrition: NutritionTotals
    coverage: int | None


@dataclass
class MealService:
    """Application service for meal catalog operations."""

    repository: MealRepository
    fridge_service: FridgeService
    ingredient_repository: IngredientRepository

    def list_meals(self, sort_by: str | None = None) -> list[MealView]:
        """Return all meals with nutrition and coverage, optionally sorted."""
        if sort_by is not None and sort_by not in SORT_OPTIONS:
            raise ValueError(f"Unsupported sort option: {sort_by}")
        snapshot = self.fridge_service.snapshot()
        views = [
            MealView(
                meal=meal,
                nutrition=meal_nutrition(meal),
                coverage=calculate_coverage(meal.lines, snapshot),
            )
            for meal in self.repository.list_meals()
        ]
        return _sort_views(views, sort_by)

    def get_meal(self, meal_id: UUID) -> MealView:
        """Return a single meal with nutrition and coverage."""
        return self._view(self._require_meal(meal_id))

    def create_meal(
        self, payload: dict[str, object], lines: list[QuantityLine]
    ) -> MealView:
        """Create a meal and return it with freshly derived nutrition."""
        name = str(payload.get("name") or "").strip()
        if not name:
            raise ValueError("Meal name is required")
        for line in lines:
            _validate_line(line)
        meal = self.repository.create_meal({**payload, "name": name}, lines)
        return MealView(
            meal=meal,
            nutrition=aggregate_nutrition(meal.lines),
            coverage=calculate_coverage(meal.lines, self.fridge_service.snapshot()),
        )

    def update_meal(self, meal_id: UUID, changes: dict[str, object]) -> MealView:
        """Change the name, description, instructions or times of a meal."""
        payload = {key: changes[key] for key in EDITABLE_FIELDS if key in changes}
        if not payload:
            raise ValueError("No fields to update")
        if "name" in payload:
            name = str(payload["name"] or "").strip()
            if not name:
                raise ValueError("Meal name is required")
            payload["name"] = name
        self._require_meal(meal_id)
        return self._view(self.repository.update_meal(meal_id, payload))

    def save_recommended(self, recommended: RecommendedMeal) -> MealView:
        """Store a generated meal, adding any ingredient the catalog lacks.

        Ingredients are matched to the catalog by name, ignoring case.
        Lines without a positive quantity or a unit are dropped.
        """
        name = recommended.name.strip()
        if not name:
            raise ValueError("Meal name is required")
        catalog = {
            ingredient.name.strip().lower(): ingredient
            for ingredient in self.ingredient_repository.list_ingredients()
        }
        lines: list[QuantityLine] = []
        for item in recommended.ingredients:
            ingredient_name = item.name.strip()
            if not ingredient_name or item.quantity <= 0 or not item.unit.strip():
                _logger.warning("Dropping unusable ingredient line of %s", name)
                continue
            ingredient = catalog.get(ingredient_name.lower())
            if ingredient is None:
                ingredient = self.ingredient_repository.create_ingredient(
                    {"name": ingredient_name}
                )
                catalog[ingredient_name.lower()] = ingredient
                _logger.info("Added ingredient %s for meal %s", ingredient_name, name)
            lines.append(
                QuantityLine(
                    ingredient_id=ingredient.id,
                    quantity=item.quantity,
                    unit=item.unit.strip(),
                )
            )
        payload: dict[str, object] = {
            "name": name,
            "description": recommended.description,
            "instructions": recommended.instructions,
            "prep_time": recommended.prep_time,
            "cook_time": recommended.cook_time,
            "servings": recommended.servings,
            "cuisine": recommended.cuisine,
            "nutrition": recommended.nutrition.model_dump(),
            "source": "ai",
            "ai_generated": True,
        }
        return self._view(self.repository.create_meal(payload, lines))

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal."""
        self._require_meal(meal_id)
        self.repository.delete_meal(meal_id)

    def add_ingredient(self, meal_id: UUID, line: QuantityLine) -> MealView:
        """Add an ingredient line to a meal."""
        _validate_line(line)
        self._require_meal(meal_id)
        self.repository.add_ingredient(meal_id, line)
        return self.get_meal(meal_id)

    def remove_ingredient(self, meal_id: UUID, ingredient_id: UUID) -> MealView:
        """Remove an ingredient from a meal."""
        self._require_meal(meal_id)
        self.repository.remove_ingredient(meal_id, ingredient_id)
        return self.get_meal(meal_id)

    def meal_coverage(self, meal_id: UUID) -> int | None:
        """Return the fridge coverage percentage for a meal."""
        meal = self._require_meal(meal_id)
        return calculate_coverage(meal.lines, self.fridge_service.snapshot())

    def meal_names(self, meal_ids: list[UUID]) -> list[str]:
        """Return names of known meals in the order of meal_ids."""
        if not meal_ids:
            return []
        meals = self.repository.get_meals(set(meal_ids))
        names = {meal.id: meal.name for meal in meals}
        return [names[meal_id] for meal_id in meal_ids if meal_id in names]

    def _view(self, meal: Meal) -> MealView:
        return MealView(
            meal=meal,
            nutrition=meal_nutrition(meal),
            coverage=calculate_coverage(meal.lines, self.fridge_service.snapshot()),
        )

    def _require_meal(self, meal_id: UUID) -> Meal:
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            raise MealNotFoundError(f"Meal {meal_id} not found")
        return meal


def _validate_line(line: QuantityLine) -> None:
    if line.quantity <= 0:
        raise ValueError("Ingredient quantity must be positive")
    if not line.unit.strip():
        raise ValueError("Ingredient unit is required")


def _sort_views(views: list[MealView], sort_by: str | None) -> list[MealView]:
    if sort_by == "name":
        return sorted(views, key=lambda view: view.meal.name.lower())
    if sort_by == "created":
        return sorted(
            views,
            key=lambda view: view.meal.created_at or datetime.min.replace(tzinfo=UTC),
            reverse=True,
        )
    if sort_by == "coverage":
        # Undefined coverage sorts after every measured meal.
        return sorted(
            views,
            key=lambda view: -1 if view.coverage is None else view.coverage,
            reverse=True,
        )
    return views
