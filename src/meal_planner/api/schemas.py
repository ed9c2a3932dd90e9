"""Pydantic models for API request bodies."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field, StrictBool


class NutritionIn(BaseModel):
    """Per-100-unit nutrition profile."""

    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)


class IngredientCreate(BaseModel):
    """Payload for creating an ingredient."""

    name: str = Field(min_length=1)
    usda_fdc_id: int | None = None
    nutrition: NutritionIn | None = None


class IngredientUpdate(BaseModel):
    """Payload for changing an ingredient; omitted fields are kept."""

    name: str | None = None
    usda_fdc_id: int | None = None
    nutrition: NutritionIn | None = None


class QuantityLineIn(BaseModel):
    """Ingredient line of a meal."""

    ingredient_id: UUID
    quantity: float = Field(gt=0)
    unit: str = Field(min_length=1)


class MealCreate(BaseModel):
    """Payload for creating a meal."""

    name: str = Field(min_length=1)
    description: str | None = None
    instructions: str | None = None
    prep_time: int | None = Field(default=None, ge=0)
    cook_time: int | None = Field(default=None, ge=0)
    ingredients: list[QuantityLineIn] = Field(default_factory=list)


class MealUpdate(BaseModel):
    """Payload for changing a meal; omitted fields are kept."""

    name: str | None = None
    description: str | None = None
    instructions: str | None = None
    prep_time: int | None = Field(default=None, ge=0)
    cook_time: int | None = Field(default=None, ge=0)


class FridgeItemCreate(BaseModel):
    """Payload for adding a fridge item."""

    ingredient_id: UUID
    quantity: float = Field(gt=0)
    unit: str = Field(min_length=1)


class FridgeItemUpdate(BaseModel):
    """Payload for changing a fridge item."""

    quantity: float = Field(gt=0)
    unit: str = Field(min_length=1)


class PlanEntryCreate(BaseModel):
    """Payload for scheduling a meal."""

    meal_id: UUID
    planned_on: date = Field(alias="date")
    meal_type: str


class PlanEntryUpdate(BaseModel):
    """Payload for moving a plan entry."""

    meal_id: UUID | None = None
    planned_on: date | None = Field(default=None, alias="date")
    meal_type: str | None = None


class RatingCreate(BaseModel):
    """Payload for rating a meal."""

    rating: StrictBool
