"""Supabase repository for meals and their ingredient lines."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meal_planner.adapters.supabase_ingredient_repository import (
    INGREDIENT_COLUMNS,
    parse_ingredient_row,
)
from meal_planner.domain.catalog import Meal, QuantityLine
from meal_planner.domain.nutrition import NutritionTotals
from meal_planner.services.meals import MealRepository

_MEAL_WITH_LINES = (
    "*, meal_ingredient!meal_id "
    f"(*, ingredient:ingredient_id ({INGREDIENT_COLUMNS}))"
)


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for the meal catalog."""

    client: Client

    def list_meals(self) -> list[Meal]:
        """Return all meals with resolved ingredient lines."""
        response = self.client.table("meal").select(_MEAL_WITH_LINES).execute()
        return [
            _parse_meal(row, row.get("meal_ingredient"))
            for row in response.data or []
        ]

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal with resolved lines, if present."""
        response = (
            self.client.table("meal")
            .select(_MEAL_WITH_LINES)
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return _parse_meal(row, row.get("meal_ingredient"))

    def get_meals(self, meal_ids: set[UUID]) -> list[Meal]:
        """Return meals by id with unresolved lines."""
        if not meal_ids:
            return []
        ids = sorted(str(meal_id) for meal_id in meal_ids)
        meals_response = self.client.table("meal").select("*").in_("id", ids).execute()
        lines_response = (
            self.client.table("meal_ingredient")
            .select("id, meal_id, ingredient_id, quantity, unit")
            .in_("meal_id", ids)
            .execute()
        )
        lines_by_meal: dict[str, list[dict[str, object]]] = {}
        for line_row in lines_response.data or []:
            lines_by_meal.setdefault(str(line_row["meal_id"]), []).append(line_row)
        return [
            _parse_meal(row, lines_by_meal.get(str(row["id"]), []))
            for row in meals_response.data or []
        ]

    def create_meal(
        self, payload: dict[str, object], lines: list[QuantityLine]
    ) -> Meal:
        """Insert a meal and its lines, then read it back with resolved lines."""
        response = self.client.table("meal").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create meal")
        meal_id = UUID(str(response.data[0]["id"]))
        if lines:
            self.client.table("meal_ingredient").insert(
                [_line_payload(meal_id, line) for line in lines]
            ).execute()
        # Insert echoes carry no joined ingredient rows.
        meal = self.get_meal(meal_id)
        if meal is None:
            raise RuntimeError("Failed to load created meal")
        return meal

    def update_meal(self, meal_id: UUID, payload: dict[str, object]) -> Meal:
        """Update meal columns and return the meal with resolved lines."""
        response = (
            self.client.table("meal")
            .update(payload)
            .eq("id", str(meal_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update meal")
        meal = self.get_meal(meal_id)
        if meal is None:
            raise RuntimeError("Failed to load updated meal")
        return meal

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete the meal's lines, then the meal."""
        self.client.table("meal_ingredient").delete().eq(
            "meal_id", str(meal_id)
        ).execute()
        self.client.table("meal").delete().eq("id", str(meal_id)).execute()

    def add_ingredient(self, meal_id: UUID, line: QuantityLine) -> None:
        """Insert a meal ingredient line."""
        response = (
            self.client.table("meal_ingredient")
            .insert(_line_payload(str(meal_id), line))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to add meal ingredient")

    def remove_ingredient(self, meal_id: UUID, ingredient_id: UUID) -> None:
        """Delete every line of the ingredient on the meal."""
        self.client.table("meal_ingredient").delete().eq("meal_id", str(meal_id)).eq(
            "ingredient_id", str(ingredient_id)
        ).execute()


def _line_payload(meal_id: object, line: QuantityLine) -> dict[str, object]:
    return {
        "meal_id": str(meal_id),
        "ingredient_id": str(line.ingredient_id),
        "quantity": line.quantity,
        "unit": line.unit,
    }


def _parse_meal(row: dict[str, object], line_rows: object) -> Meal:
    created_raw = row.get("created_at")
    return Meal(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        lines=[_parse_line(line) for line in line_rows or []],
        description=row.get("description"),
        instructions=row.get("instructions"),
        prep_time_minutes=row.get("prep_time"),
        cook_time_minutes=row.get("cook_time"),
        nutrition=_parse_totals(row.get("nutrition")),
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )


def _parse_line(row: dict[str, object]) -> QuantityLine:
    ingredient_row = row.get("ingredient")
    return QuantityLine(
        ingredient_id=UUID(str(row["ingredient_id"])),
        quantity=float(row.get("quantity") or 0.0),
        unit=str(row.get("unit") or ""),
        ingredient=(
            parse_ingredient_row(ingredient_row)
            if isinstance(ingredient_row, dict)
            else None
        ),
    )


def _parse_totals(raw: object) -> NutritionTotals | None:
    """Stored meal totals are used only when all four values are present."""
    if not isinstance(raw, dict):
        return None
    values = [raw.get(key) for key in ("calories", "protein", "carbs", "fat")]
    if not all(
        isinstance(value, int | float) and not isinstance(value, bool)
        for value in values
    ):
        return None
    calories, protein, carbs, fat = (float(value) for value in values)
    return NutritionTotals(calories=calories, protein=protein, carbs=carbs, fat=fat)
