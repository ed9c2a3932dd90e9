"""Domain models for the weekly meal plan."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from uuid import UUID


class MealSlot(Enum):
    """Slot a planned meal occupies on a given day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class PlanEntry:
    """A meal scheduled on a date in a slot."""

    id: UUID
    date: date
    meal_slot: MealSlot
    meal_id: UUID
