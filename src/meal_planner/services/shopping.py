"""Shopping list reconciliation of a meal plan against the fridge."""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import date
from typing import TypeVar
from uuid import UUID

from meal_planner.domain.catalog import Ingredient, Meal
from meal_planner.domain.errors import DataFetchError
from meal_planner.domain.planning import PlanEntry
from meal_planner.domain.shopping import (
    RequiredIngredient,
    ShoppingListResult,
    StockStatus,
)
from meal_planner.services.fridge import FridgeRepository
from meal_planner.services.ingredients import IngredientRepository
from meal_planner.services.inventory import (
    InventorySnapshot,
    build_inventory_snapshot,
    classify_stock,
    on_hand_quantity,
)
from meal_planner.services.meals import MealRepository
from meal_planner.services.plan import PlanRepository

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Requirement:
    ingredient_id: UUID
    name: str
    unit: str
    required: float = 0.0


def reconcile(
    plan_entries: Sequence[PlanEntry],
    meals: Mapping[UUID, Meal],
    on_hand: InventorySnapshot,
) -> ShoppingListResult:
    """Aggregate plan requirements per ingredient and classify against stock.

    Entries whose meal is unknown and lines whose ingredient is unresolved
    are skipped; the rest of the plan is still reconciled.
    """
    requirements: dict[UUID, _Requirement] = {}
    for entry in plan_entries:
        meal = meals.get(entry.meal_id)
        if meal is None:
            _logger.warning(
                "Skipping plan entry %s: meal %s not found", entry.id, entry.meal_id
            )
            continue
        for line in meal.lines:
            if line.ingredient is None:
                _logger.warning(
                    "Skipping line of meal %s: ingredient %s not found",
                    meal.id,
                    line.ingredient_id,
                )
                continue
            requirement = requirements.get(line.ingredient_id)
            if requirement is None:
                requirement = _Requirement(
                    ingredient_id=line.ingredient_id,
                    name=line.ingredient.name,
                    unit=line.unit,
                )
                requirements[line.ingredient_id] = requirement
            requirement.required += line.quantity

    items: list[RequiredIngredient] = []
    for requirement in requirements.values():
        if requirement.required <= 0:
            continue
        stock = on_hand_quantity(on_hand, requirement.ingredient_id)
        items.append(
            RequiredIngredient(
                ingredient_id=requirement.ingredient_id,
                name=requirement.name,
                required=requirement.required,
                unit=requirement.unit,
                on_hand=stock,
                status=classify_stock(requirement.required, stock),
            )
        )
    return _summarize(items)


def attach_ingredients(
    meals: Iterable[Meal], ingredients: Iterable[Ingredient]
) -> dict[UUID, Meal]:
    """Resolve each meal line's ingredient reference, keyed by meal id."""
    by_id = {ingredient.id: ingredient for ingredient in ingredients}
    return {
        meal.id: replace(
            meal,
            lines=[
                replace(line, ingredient=by_id.get(line.ingredient_id))
                for line in meal.lines
            ],
        )
        for meal in meals
    }


def _summarize(items: list[RequiredIngredient]) -> ShoppingListResult:
    counts = {status: 0 for status in StockStatus}
    for item in items:
        counts[item.status] += 1
    return ShoppingListResult(
        items=items,
        total_items=len(items),
        need_to_buy=counts[StockStatus.NEED_TO_BUY],
        partial=counts[StockStatus.PARTIAL],
        in_stock=counts[StockStatus.IN_STOCK],
    )


@dataclass
class ShoppingService:
    """Fetches plan, meal, ingredient and fridge data and reconciles it."""

    plan_repository: PlanRepository
    meal_repository: MealRepository
    ingredient_repository: IngredientRepository
    fridge_repository: FridgeRepository

    def build_shopping_list(
        self, start: date | None = None, end: date | None = None
    ) -> ShoppingListResult:
        """Return the shopping list for plan entries in the date range."""
        entries = _fetch(
            "plan entries", lambda: self.plan_repository.list_entries(start, end)
        )
        meal_ids = {entry.meal_id for entry in entries}
        if not meal_ids:
            return ShoppingListResult()

        meals = _fetch("meals", lambda: self.meal_repository.get_meals(meal_ids))
        ingredient_ids = {line.ingredient_id for meal in meals for line in meal.lines}
        if not ingredient_ids:
            return ShoppingListResult()

        ingredients = _fetch(
            "ingredients",
            lambda: self.ingredient_repository.get_ingredients(ingredient_ids),
        )
        fridge_items = _fetch("fridge items", self.fridge_repository.list_items)

        snapshot = build_inventory_snapshot(item.as_line() for item in fridge_items)
        result = reconcile(entries, attach_ingredients(meals, ingredients), snapshot)
        _logger.info(
            "Shopping list built: entries=%s items=%s need_to_buy=%s",
            len(entries),
            result.total_items,
            result.need_to_buy,
        )
        return result


def _fetch(source: str, func: Callable[[], T]) -> T:
    """Run a data-access call, tagging failures with the data source."""
    try:
        return func()
    except Exception as exc:
        _logger.exception("Failed to fetch %s", source)
        raise DataFetchError(source) from exc
