"""Meal rating service."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_planner.domain.errors import MealNotFoundError
from meal_planner.domain.ratings import MealRating, RatingSummary
from meal_planner.services.meals import MealRepository


class RatingRepository(Protocol):
    """Persistence interface for meal ratings."""

    def create_rating(self, meal_id: UUID, liked: bool) -> MealRating:
        """Store a rating and return it."""

    def list_ratings(self, meal_id: UUID | None = None) -> list[MealRating]:
        """Return ratings, optionally for a single meal."""


@dataclass
class RatingService:
    """Application service for rating meals."""

    repository: RatingRepository
    meal_repository: MealRepository

    def rate(self, meal_id: UUID, liked: bool) -> MealRating:
        """Record a like or dislike for a meal."""
        self._require_meal(meal_id)
        return self.repository.create_rating(meal_id, liked)

    def summary(self, meal_id: UUID) -> RatingSummary:
        """Return like and dislike counts for a meal."""
        self._require_meal(meal_id)
        ratings = self.repository.list_ratings(meal_id)
        likes = sum(1 for rating in ratings if rating.liked)
        return RatingSummary(
            likes=likes, dislikes=len(ratings) - likes, total=len(ratings)
        )

    def liked_meal_ids(self) -> list[UUID]:
        """Return ids of meals with more likes than dislikes, best first."""
        scores: dict[UUID, int] = {}
        for rating in self.repository.list_ratings():
            scores[rating.meal_id] = scores.get(rating.meal_id, 0) + (
                1 if rating.liked else -1
            )
        ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
        return [meal_id for meal_id, score in ranked if score > 0]

    def _require_meal(self, meal_id: UUID) -> None:
        if self.meal_repository.get_meal(meal_id) is None:
            raise MealNotFoundError(f"Meal {meal_id} not found")
