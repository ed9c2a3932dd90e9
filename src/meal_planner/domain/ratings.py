"""Domain models for meal ratings."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class MealRating:
    """A thumbs-up or thumbs-down on a meal."""

    id: UUID
    meal_id: UUID
    liked: bool
    created_at: datetime | None = None


@dataclass(frozen=True)
class RatingSummary:
    """Like and dislike counts for a meal."""

    likes: int
    dislikes: int
    total: int
