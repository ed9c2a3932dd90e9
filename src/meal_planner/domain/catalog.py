"""Domain models for the ingredient and meal catalog."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from meal_planner.domain.nutrition import NutritionTotals


@dataclass(frozen=True)
class NutritionProfile:
    """Nutrients per 100 units of quantity. Missing fields are None."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None


@dataclass(frozen=True)
class Ingredient:
    """Catalog ingredient."""

    id: UUID
    name: str
    nutrition: NutritionProfile | None = None
    usda_fdc_id: int | None = None


@dataclass(frozen=True)
class QuantityLine:
    """An (ingredient, quantity, unit) tuple owned by a meal or the fridge.

    ``ingredient`` is filled in once the reference has been resolved.
    """

    ingredient_id: UUID
    quantity: float
    unit: str
    ingredient: Ingredient | None = None


@dataclass(frozen=True)
class Meal:
    """A cataloged meal and its recipe lines."""

    id: UUID
    name: str
    lines: list[QuantityLine] = field(default_factory=list)
    description: str | None = None
    instructions: str | None = None
    prep_time_minutes: int | None = None
    cook_time_minutes: int | None = None
    nutrition: NutritionTotals | None = None
    created_at: datetime | None = None
