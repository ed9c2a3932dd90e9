"""Weekly meal plan service."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol
from uuid import UUID

from meal_planner.domain.errors import MealNotFoundError, PlanEntryNotFoundError
from meal_planner.domain.planning import MealSlot, PlanEntry
from meal_planner.services.meals import MealRepository

DAYS_PER_WEEK = 7


class PlanRepository(Protocol):
    """Persistence interface for plan entries."""

    def list_entries(
        self, start: date | None = None, end: date | None = None
    ) -> list[PlanEntry]:
        """Return plan entries with start <= date < end, ordered by date."""

    def get_entry(self, entry_id: UUID) -> PlanEntry | None:
        """Return a plan entry by id, if present."""

    def create_entry(
        self, meal_id: UUID, planned_on: date, meal_slot: MealSlot
    ) -> PlanEntry:
        """Create a plan entry and return it."""

    def update_entry(self, entry_id: UUID, changes: dict[str, object]) -> PlanEntry:
        """Update meal_id, date or meal_type of an entry and return it."""

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete a plan entry."""


@dataclass
class PlanService:
    """Application service for scheduling meals."""

    repository: PlanRepository
    meal_repository: MealRepository

    def list_entries(
        self, start: date | None = None, end: date | None = None
    ) -> list[PlanEntry]:
        """Return plan entries in a date range."""
        return self.repository.list_entries(start, end)

    def list_week(self, day: date) -> list[PlanEntry]:
        """Return the entries of the Monday-based week containing day."""
        start, end = week_bounds(day)
        return self.repository.list_entries(start, end)

    def schedule(
        self, meal_id: UUID, planned_on: date, meal_slot: MealSlot | str
    ) -> PlanEntry:
        """Schedule a meal on a date in a slot."""
        slot = parse_meal_slot(meal_slot)
        if self.meal_repository.get_meal(meal_id) is None:
            raise MealNotFoundError(f"Meal {meal_id} not found")
        return self.repository.create_entry(meal_id, planned_on, slot)

    def get_entry(self, entry_id: UUID) -> PlanEntry:
        """Return a single plan entry."""
        entry = self.repository.get_entry(entry_id)
        if entry is None:
            raise PlanEntryNotFoundError(f"Plan entry {entry_id} not found")
        return entry

    def reschedule(
        self,
        entry_id: UUID,
        meal_id: UUID | None = None,
        planned_on: date | None = None,
        meal_slot: MealSlot | str | None = None,
    ) -> PlanEntry:
        """Move an entry to another meal, date or slot."""
        changes: dict[str, object] = {}
        if meal_id is not None:
            if self.meal_repository.get_meal(meal_id) is None:
                raise MealNotFoundError(f"Meal {meal_id} not found")
            changes["meal_id"] = str(meal_id)
        if planned_on is not None:
            changes["date"] = planned_on.isoformat()
        if meal_slot is not None:
            changes["meal_type"] = parse_meal_slot(meal_slot).value
        if not changes:
            raise ValueError("No fields to update")
        self.get_entry(entry_id)
        return self.repository.update_entry(entry_id, changes)

    def remove(self, entry_id: UUID) -> None:
        """Remove a plan entry."""
        self.get_entry(entry_id)
        self.repository.delete_entry(entry_id)


def week_bounds(day: date) -> tuple[date, date]:
    """Return the Monday of day's week and the following Monday."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=DAYS_PER_WEEK)


def parse_meal_slot(value: MealSlot | str) -> MealSlot:
    """Parse a slot label, rejecting anything outside the four slots."""
    if isinstance(value, MealSlot):
        return value
    try:
        return MealSlot(value.strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown meal slot: {value}") from exc
