"""Supabase repository for catalog ingredients."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_planner.domain.catalog import Ingredient, NutritionProfile
from meal_planner.services.ingredients import IngredientRepository

INGREDIENT_COLUMNS = "id, name, usda_fdc_id, nutrition"


@dataclass
class SupabaseIngredientRepository(IngredientRepository):
    """Supabase implementation for the ingredient catalog."""

    client: Client

    def list_ingredients(self) -> list[Ingredient]:
        """Return all ingredients."""
        response = (
            self.client.table("ingredient").select(INGREDIENT_COLUMNS).execute()
        )
        return [parse_ingredient_row(row) for row in response.data or []]

    def get_ingredients(self, ingredient_ids: set[UUID]) -> list[Ingredient]:
        """Return ingredients by id."""
        if not ingredient_ids:
            return []
        response = (
            self.client.table("ingredient")
            .select(INGREDIENT_COLUMNS)
            .in_("id", sorted(str(ingredient_id) for ingredient_id in ingredient_ids))
            .execute()
        )
        return [parse_ingredient_row(row) for row in response.data or []]

    def search_ingredients(self, query: str, limit: int) -> list[Ingredient]:
        """Return ingredients whose name contains the query."""
        response = (
            self.client.table("ingredient")
            .select(INGREDIENT_COLUMNS)
            .ilike("name", f"%{query}%")
            .limit(limit)
            .execute()
        )
        return [parse_ingredient_row(row) for row in response.data or []]

    def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        """Create an ingredient row and return it."""
        response = self.client.table("ingredient").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create ingredient")
        return parse_ingredient_row(response.data[0])

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient by id, if present."""
        response = (
            self.client.table("ingredient")
            .select(INGREDIENT_COLUMNS)
            .eq("id", str(ingredient_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_ingredient_row(response.data[0])

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Update ingredient columns and return the updated row."""
        response = (
            self.client.table("ingredient")
            .update(payload)
            .eq("id", str(ingredient_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update ingredient")
        return parse_ingredient_row(response.data[0])

    def ingredient_in_use(self, ingredient_id: UUID) -> bool:
        """Return whether any meal line references the ingredient."""
        response = (
            self.client.table("meal_ingredient")
            .select("id")
            .eq("ingredient_id", str(ingredient_id))
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        """Delete fridge items holding the ingredient, then the ingredient."""
        self.client.table("fridge_item").delete().eq(
            "ingredient_id", str(ingredient_id)
        ).execute()
        self.client.table("ingredient").delete().eq("id", str(ingredient_id)).execute()


def parse_ingredient_row(row: dict[str, object]) -> Ingredient:
    """Parse an ingredient row, including its JSON nutrition column."""
    fdc_id = row.get("usda_fdc_id")
    return Ingredient(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        nutrition=_parse_nutrition(row.get("nutrition")),
        usda_fdc_id=int(fdc_id) if isinstance(fdc_id, int | str) and fdc_id else None,
    )


def _parse_nutrition(raw: object) -> NutritionProfile | None:
    if not isinstance(raw, dict):
        return None
    return NutritionProfile(
        calories=_number(raw.get("calories")),
        protein=_number(raw.get("protein")),
        carbs=_number(raw.get("carbs")),
        fat=_number(raw.get("fat")),
    )


def _number(value: object) -> float | None:
    """Return numeric JSON values as float; anything else is treated as missing."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    return None
