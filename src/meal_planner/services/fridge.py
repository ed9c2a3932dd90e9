"""Fridge inventory service."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_planner.domain.errors import FridgeItemNotFoundError
from meal_planner.domain.fridge import FridgeItem
from meal_planner.services.inventory import build_inventory_snapshot


class FridgeRepository(Protocol):
    """Persistence interface for fridge items."""

    def list_items(self) -> list[FridgeItem]:
        """Return all fridge items with resolved ingredients."""

    def get_item(self, item_id: UUID) -> FridgeItem | None:
        """Return a fridge item by id, if present."""

    def add_item(self, ingredient_id: UUID, quantity: float, unit: str) -> FridgeItem:
        """Create a fridge item and return it."""

    def update_item(self, item_id: UUID, quantity: float, unit: str) -> FridgeItem:
        """Update quantity and unit of a fridge item."""

    def delete_item(self, item_id: UUID) -> None:
        """Delete a fridge item."""


@dataclass
class FridgeService:
    """Application service for the fridge inventory."""

    repository: FridgeRepository

    def list_items(self) -> list[FridgeItem]:
        """Return all fridge items."""
        return self.repository.list_items()

    def get_item(self, item_id: UUID) -> FridgeItem:
        """Return a single fridge item."""
        item = self.repository.get_item(item_id)
        if item is None:
            raise FridgeItemNotFoundError(f"Fridge item {item_id} not found")
        return item

    def add_item(self, ingredient_id: UUID, quantity: float, unit: str) -> FridgeItem:
        """Store a quantity of an ingredient."""
        _validate_quantity(quantity, unit)
        return self.repository.add_item(ingredient_id, quantity, unit.strip())

    def update_item(self, item_id: UUID, quantity: float, unit: str) -> FridgeItem:
        """Change the stored quantity of a fridge item."""
        _validate_quantity(quantity, unit)
        self.get_item(item_id)
        return self.repository.update_item(item_id, quantity, unit.strip())

    def delete_item(self, item_id: UUID) -> None:
        """Remove a fridge item."""
        self.get_item(item_id)
        self.repository.delete_item(item_id)

    def snapshot(self) -> dict[UUID, float]:
        """Return on-hand quantity per ingredient."""
        return build_inventory_snapshot(
            item.as_line() for item in self.repository.list_items()
        )


def _validate_quantity(quantity: float, unit: str) -> None:
    if quantity <= 0:
        raise ValueError("Quantity must be positive")
    if not unit.strip():
        raise ValueError("Unit is required")
