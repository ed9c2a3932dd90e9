"""Supabase repository for meal ratings."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meal_planner.domain.ratings import MealRating
from meal_planner.services.ratings import RatingRepository


@dataclass
class SupabaseRatingRepository(RatingRepository):
    """Supabase implementation for meal ratings."""

    client: Client

    def create_rating(self, meal_id: UUID, liked: bool) -> MealRating:
        """Insert a rating row."""
        response = (
            self.client.table("meal_rating")
            .insert({"meal_id": str(meal_id), "rating": liked})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to rate meal")
        return _parse_rating(response.data[0])

    def list_ratings(self, meal_id: UUID | None = None) -> list[MealRating]:
        """Return ratings, optionally for one meal."""
        query = self.client.table("meal_rating").select("*")
        if meal_id is not None:
            query = query.eq("meal_id", str(meal_id))
        response = query.execute()
        return [_parse_rating(row) for row in response.data or []]


def _parse_rating(row: dict[str, object]) -> MealRating:
    created_raw = row.get("created_at")
    return MealRating(
        id=UUID(str(row["id"])),
        meal_id=UUID(str(row["meal_id"])),
        liked=bool(row.get("rating")),
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
    )
