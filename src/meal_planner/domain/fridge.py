"""Domain models for the fridge inventory."""

from dataclasses import dataclass
from uuid import UUID

from meal_planner.domain.catalog import Ingredient, QuantityLine


@dataclass(frozen=True)
class FridgeItem:
    """A stored quantity of one ingredient."""

    id: UUID
    ingredient_id: UUID
    quantity: float
    unit: str
    ingredient: Ingredient | None = None

    def as_line(self) -> QuantityLine:
        """Return the item as an inventory quantity line."""
        return QuantityLine(
            ingredient_id=self.ingredient_id,
            quantity=self.quantity,
            unit=self.unit,
            ingredient=self.ingredient,
        )
