"""Domain models for shopping list reconciliation."""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID


class StockStatus(Enum):
    """Stock state of a required ingredient."""

    IN_STOCK = "in-stock"
    PARTIAL = "partial"
    NEED_TO_BUY = "need-to-buy"


@dataclass(frozen=True)
class RequiredIngredient:
    """Aggregate requirement for one ingredient across a plan."""

    ingredient_id: UUID
    name: str
    required: float
    unit: str
    on_hand: float
    status: StockStatus


@dataclass(frozen=True)
class ShoppingListResult:
    """Classified shopping list with summary counts."""

    items: list[RequiredIngredient] = field(default_factory=list)
    total_items: int = 0
    need_to_buy: int = 0
    partial: int = 0
    in_stock: int = 0
