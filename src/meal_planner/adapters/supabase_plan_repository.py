"""Supabase repository for meal plan entries."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from meal_planner.domain.planning import MealSlot, PlanEntry
from meal_planner.services.plan import PlanRepository


@dataclass
class SupabasePlanRepository(PlanRepository):
    """Supabase implementation for plan entries."""

    client: Client

    def list_entries(
        self, start: date | None = None, end: date | None = None
    ) -> list[PlanEntry]:
        """Return plan entries with start <= date < end."""
        query = self.client.table("meal_plan").select("id, meal_id, date, meal_type")
        if start is not None:
            query = query.gte("date", start.isoformat())
        if end is not None:
            query = query.lt("date", end.isoformat())
        response = query.order("date", desc=False).execute()
        entries: list[PlanEntry] = []
        for row in response.data or []:
            entry = _parse_entry(row)
            if entry is not None:
                entries.append(entry)
        return entries

    def get_entry(self, entry_id: UUID) -> PlanEntry | None:
        """Return a plan entry by id, if present."""
        response = (
            self.client.table("meal_plan")
            .select("id, meal_id, date, meal_type")
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def create_entry(
        self, meal_id: UUID, planned_on: date, meal_slot: MealSlot
    ) -> PlanEntry:
        """Insert a plan entry."""
        response = (
            self.client.table("meal_plan")
            .insert(
                {
                    "meal_id": str(meal_id),
                    "date": planned_on.isoformat(),
                    "meal_type": meal_slot.value,
                }
            )
            .execute()
        )
        entry = _parse_entry(response.data[0]) if response.data else None
        if entry is None:
            raise RuntimeError("Failed to create plan entry")
        return entry

    def update_entry(self, entry_id: UUID, changes: dict[str, object]) -> PlanEntry:
        """Update a plan entry and return the stored row."""
        response = (
            self.client.table("meal_plan")
            .update(changes)
            .eq("id", str(entry_id))
            .execute()
        )
        entry = _parse_entry(response.data[0]) if response.data else None
        if entry is None:
            raise RuntimeError("Failed to update plan entry")
        return entry

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete a plan entry."""
        self.client.table("meal_plan").delete().eq("id", str(entry_id)).execute()


def _parse_entry(row: dict[str, object]) -> PlanEntry | None:
    """Parse a plan row; rows without a meal reference are dropped."""
    meal_id = row.get("meal_id")
    if not meal_id:
        return None
    return PlanEntry(
        id=UUID(str(row["id"])),
        date=date.fromisoformat(str(row["date"])[:10]),
        meal_slot=MealSlot(str(row.get("meal_type", "")).lower()),
        meal_id=UUID(str(meal_id)),
    )
