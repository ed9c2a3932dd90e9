"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionTotals:
    """Total calories and macros for a prepared meal."""

    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class FoodSummary:
    """Summary information about a food from FDC."""

    fdc_id: int
    description: str
    data_type: str | None
