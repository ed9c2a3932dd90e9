"""Per-ingredient matching between requirements and on-hand stock."""

from collections.abc import Iterable, Mapping
from uuid import UUID

from meal_planner.domain.catalog import QuantityLine
from meal_planner.domain.shopping import StockStatus

InventorySnapshot = Mapping[UUID, float]


def build_inventory_snapshot(items: Iterable[QuantityLine]) -> dict[UUID, float]:
    """Sum on-hand quantity per ingredient. Units are not converted."""
    totals: dict[UUID, float] = {}
    for item in items:
        current = totals.get(item.ingredient_id, 0.0)
        totals[item.ingredient_id] = current + item.quantity
    return {ingredient_id: max(total, 0.0) for ingredient_id, total in totals.items()}


def on_hand_quantity(snapshot: InventorySnapshot, ingredient_id: UUID) -> float:
    """Return the on-hand quantity for an ingredient, 0 when absent."""
    return max(snapshot.get(ingredient_id, 0.0), 0.0)


def stock_ratio(required: float, on_hand: float) -> float | None:
    """Fraction of a requirement covered by stock, or None if nothing is required."""
    if required <= 0:
        return None
    ratio = min(on_hand, required) / required
    return min(max(ratio, 0.0), 1.0)


def classify_stock(required: float, on_hand: float) -> StockStatus:
    """Classify an ingredient requirement against on-hand stock."""
    if on_hand >= required:
        return StockStatus.IN_STOCK
    if on_hand > 0:
        return StockStatus.PARTIAL
    return StockStatus.NEED_TO_BUY
