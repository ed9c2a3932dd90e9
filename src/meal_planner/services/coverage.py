"""How much of a meal can be made from current stock."""

import math
from collections.abc import Sequence

from meal_planner.domain.catalog import QuantityLine
from meal_planner.services.inventory import (
    InventorySnapshot,
    on_hand_quantity,
    stock_ratio,
)

FULL_COVERAGE = 100


def calculate_coverage(
    required: Sequence[QuantityLine], on_hand: InventorySnapshot
) -> int | None:
    """Return the average per-line stock ratio as a 0-100 percentage.

    Returns None when there is nothing to measure: an empty recipe, or one
    whose lines all have a non-positive quantity.
    """
    ratios: list[float] = []
    for line in required:
        stock = on_hand_quantity(on_hand, line.ingredient_id)
        ratio = stock_ratio(line.quantity, stock)
        if ratio is None:
            continue
        ratios.append(ratio)
    if not ratios:
        return None

    percentage = math.floor(sum(ratios) / len(ratios) * FULL_COVERAGE + 0.5)
    # Departs from plain rounding: 100 only when every line is fully
    # stocked, 0 only when no line has any stock.
    if percentage >= FULL_COVERAGE and any(ratio < 1.0 for ratio in ratios):
        return FULL_COVERAGE - 1
    if percentage <= 0 and any(ratio > 0.0 for ratio in ratios):
        return 1
    return percentage
