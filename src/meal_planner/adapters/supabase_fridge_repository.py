"""Supabase repository for fridge items."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_planner.adapters.supabase_ingredient_repository import (
    INGREDIENT_COLUMNS,
    parse_ingredient_row,
)
from meal_planner.domain.fridge import FridgeItem
from meal_planner.services.fridge import FridgeRepository

_ITEM_COLUMNS = (
    "id, ingredient_id, quantity, unit, "
    f"ingredient:ingredient_id ({INGREDIENT_COLUMNS})"
)


@dataclass
class SupabaseFridgeRepository(FridgeRepository):
    """Supabase implementation for the fridge inventory."""

    client: Client

    def list_items(self) -> list[FridgeItem]:
        """Return all fridge items with their ingredients."""
        response = self.client.table("fridge_item").select(_ITEM_COLUMNS).execute()
        return [_parse_item(row) for row in response.data or []]

    def get_item(self, item_id: UUID) -> FridgeItem | None:
        """Return a fridge item by id, if present."""
        response = (
            self.client.table("fridge_item")
            .select(_ITEM_COLUMNS)
            .eq("id", str(item_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def add_item(self, ingredient_id: UUID, quantity: float, unit: str) -> FridgeItem:
        """Insert a fridge item."""
        response = (
            self.client.table("fridge_item")
            .insert(
                {
                    "ingredient_id": str(ingredient_id),
                    "quantity": quantity,
                    "unit": unit,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to add fridge item")
        return _parse_item(response.data[0])

    def update_item(self, item_id: UUID, quantity: float, unit: str) -> FridgeItem:
        """Update quantity and unit of a fridge item."""
        response = (
            self.client.table("fridge_item")
            .update({"quantity": quantity, "unit": unit})
            .eq("id", str(item_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update fridge item")
        return _parse_item(response.data[0])

    def delete_item(self, item_id: UUID) -> None:
        """Delete a fridge item."""
        self.client.table("fridge_item").delete().eq("id", str(item_id)).execute()


def _parse_item(row: dict[str, object]) -> FridgeItem:
    ingredient_row = row.get("ingredient")
    return FridgeItem(
        id=UUID(str(row["id"])),
        ingredient_id=UUID(str(row["ingredient_id"])),
        quantity=float(row.get("quantity") or 0.0),
        unit=str(row.get("unit") or ""),
        ingredient=(
            parse_ingredient_row(ingredient_row)
            if isinstance(ingredient_row, dict)
            else None
        ),
    )
