"""Meal nutrition aggregation."""

import math
from collections.abc import Iterable

from meal_planner.domain.catalog import Meal, QuantityLine
from meal_planner.domain.nutrition import NutritionTotals

_PROFILE_BASIS = 100.0


def aggregate_nutrition(lines: Iterable[QuantityLine]) -> NutritionTotals:
    """Sum per-100-unit nutrition profiles scaled by each line's quantity.

    Lines without a resolved ingredient, without a profile, or with a
    missing nutrient field contribute zero for that field.
    """
    calories = protein = carbs = fat = 0.0
    for line in lines:
        profile = line.ingredient.nutrition if line.ingredient else None
        if profile is None:
            continue
        multiplier = line.quantity / _PROFILE_BASIS
        if profile.calories is not None:
            calories += profile.calories * multiplier
        if profile.protein is not None:
            protein += profile.protein * multiplier
        if profile.carbs is not None:
            carbs += profile.carbs * multiplier
        if profile.fat is not None:
            fat += profile.fat * multiplier

    return NutritionTotals(
        calories=round_one_decimal(calories),
        protein=round_one_decimal(protein),
        carbs=round_one_decimal(carbs),
        fat=round_one_decimal(fat),
    )


def meal_nutrition(meal: Meal) -> NutritionTotals:
    """Return stored totals for a meal, deriving them from its lines if absent."""
    if meal.nutrition is not None:
        return meal.nutrition
    return aggregate_nutrition(meal.lines)


def round_one_decimal(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10
