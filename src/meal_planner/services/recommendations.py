"""Meal recommendations generated from fridge contents."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from meal_planner.domain.fridge import FridgeItem
from meal_planner.domain.recommendations import (
    RecommendationBatch,
    RecommendationPage,
    RecommendedMeal,
)

MAX_PROMPT_FRIDGE_ITEMS = 15
MAX_PROMPT_LIKED_MEALS = 5

_logger = logging.getLogger(__name__)

_INGREDIENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "quantity": {"type": "number", "minimum": 0},
        "unit": {"type": "string"},
    },
    "required": ["name", "quantity", "unit"],
    "additionalProperties": False,
}

_NUTRITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {"type": "number"},
        "protein": {"type": "number"},
        "carbs": {"type": "number"},
        "fat": {"type": "number"},
    },
    "required": ["calories", "protein", "carbs", "fat"],
    "additionalProperties": False,
}

RECOMMENDATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "recommendations": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "instructions": {"type": "string"},
                    "prepTime": {"type": "integer", "minimum": 0},
                    "cookTime": {"type": "integer", "minimum": 0},
                    "servings": {"type": "integer", "minimum": 1},
                    "cuisine": {"type": "string"},
                    "ingredients": {"type": "array", "items": _INGREDIENT_SCHEMA},
                    "nutrition": _NUTRITION_SCHEMA,
                },
                "required": [
                    "name",
                    "description",
                    "instructions",
                    "prepTime",
                    "cookTime",
                    "servings",
                    "cuisine",
                    "ingredients",
                    "nutrition",
                ],
                "additionalProperties": False,
            },
        }
    },
    "required": ["recommendations"],
    "additionalProperties": False,
}


class RecommendationClient(Protocol):
    """Interface for LLM-backed recommendation generation."""

    async def generate(
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return structured recommendation data."""


@dataclass
class RecommendationService:
    """Builds prompts, validates generated meals and falls back when needed."""

    client: RecommendationClient | None
    model: str
    store: bool = False

    async def recommend(  # noqa: PLR0913
        self,
        fridge_items: list[FridgeItem],
        liked_meal_names: list[str],
        *,
        page: int = 1,
        page_size: int = 6,
        cuisine: str | None = None,
        max_prep_time: int | None = None,
    ) -> RecommendationPage:
        """Return a filtered, paginated page of recommended meals."""
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be positive")
        # Generate enough meals to fill every page up to the requested one.
        meals = await self._generate(fridge_items, liked_meal_names, page * page_size)
        if cuisine:
            meals = [meal for meal in meals if meal.cuisine.lower() == cuisine.lower()]
        if max_prep_time is not None:
            meals = [meal for meal in meals if meal.prep_time <= max_prep_time]
        start = (page - 1) * page_size
        return RecommendationPage(
            items=meals[start : start + page_size],
            total=len(meals),
            page=page,
            page_size=page_size,
        )

    async def _generate(
        self, fridge_items: list[FridgeItem], liked_meal_names: list[str], count: int
    ) -> list[RecommendedMeal]:
        if self.client is None:
            _logger.warning("No recommendation client configured; using fallback")
            return fallback_recommendations(count)
        try:
            raw = await self.client.generate(
                model=self.model,
                store=self.store,
                instructions=(
                    "You are a chef who creates meal recommendations. "
                    "Respond with valid JSON."
                ),
                prompt=build_prompt(fridge_items, liked_meal_names, count),
                schema=RECOMMENDATION_SCHEMA,
            )
            batch = RecommendationBatch.model_validate(raw)
        except ValidationError:
            _logger.exception("Generated recommendations failed validation")
            return fallback_recommendations(count)
        except Exception:
            _logger.exception("Recommendation generation failed")
            return fallback_recommendations(count)
        if not batch.recommendations:
            _logger.warning("Recommendation client returned no meals; using fallback")
            return fallback_recommendations(count)
        return batch.recommendations


def build_prompt(
    fridge_items: list[FridgeItem], liked_meal_names: list[str], count: int
) -> str:
    """Describe the fridge and liked meals for the recommendation model."""
    stocked = ", ".join(
        f"{_format_quantity(item.quantity)} {item.unit} of {item.ingredient.name}"
        for item in fridge_items[:MAX_PROMPT_FRIDGE_ITEMS]
        if item.ingredient is not None
    )
    lines = [
        f"Create {count} meal recommendations using these ingredients: "
        f"{stocked or 'any ingredients'}."
    ]
    liked = liked_meal_names[:MAX_PROMPT_LIKED_MEALS]
    if liked:
        lines.append(f"Highly rated meals: {', '.join(liked)}")
    lines.append(
        "Quantities are per recipe; nutrition is per serving. "
        "Times are in minutes."
    )
    return "\n".join(lines)


def _format_quantity(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def fallback_recommendations(count: int) -> list[RecommendedMeal]:
    """Return up to count meals from the built-in list."""
    return [meal.model_copy(deep=True) for meal in _FALLBACK_MEALS[:count]]


def _meal(  # noqa: PLR0913
    name: str,
    description: str,
    instructions: str,
    prep_time: int,
    cook_time: int,
    servings: int,
    cuisine: str,
    ingredients: list[tuple[str, float, str]],
    nutrition: tuple[float, float, float, float],
) -> RecommendedMeal:
    calories, protein, carbs, fat = nutrition
    return RecommendedMeal.model_validate(
        {
            "name": name,
            "description": description,
            "instructions": instructions,
            "prepTime": prep_time,
            "cookTime": cook_time,
            "servings": servings,
            "cuisine": cuisine,
            "ingredients": [
                {"name": item, "quantity": quantity, "unit": unit}
                for item, quantity, unit in ingredients
            ],
            "nutrition": {
                "calories": calories,
                "protein": protein,
                "carbs": carbs,
                "fat": fat,
            },
        }
    )


_FALLBACK_MEALS: list[RecommendedMeal] = [
    _meal(
        "Mediterranean Grilled Chicken Salad",
        "Grilled chicken over greens with a lemon and olive oil dressing.",
        "1. Grill the chicken\n2. Chop the vegetables\n"
        "3. Toss with olive oil and lemon\n4. Top with feta",
        15,
        15,
        2,
        "Mediterranean",
        [
            ("Chicken Breast", 200, "g"),
            ("Mixed Greens", 150, "g"),
            ("Cherry Tomatoes", 100, "g"),
            ("Cucumber", 1, "medium"),
            ("Feta Cheese", 50, "g"),
            ("Olive Oil", 2, "tbsp"),
        ],
        (350, 30, 10, 20),
    ),
    _meal(
        "Asian Vegetable Stir Fry",
        "Quick vegetable stir fry in a soy and sesame sauce.",
        "1. Chop the vegetables\n2. Heat oil in a wok\n"
        "3. Stir fry the vegetables\n4. Add sauce and serve over rice",
        10,
        10,
        2,
        "Asian",
        [
            ("Bell Pepper", 1, "medium"),
            ("Broccoli", 150, "g"),
            ("Carrots", 2, "medium"),
            ("Snap Peas", 100, "g"),
            ("Soy Sauce", 2, "tbsp"),
            ("Sesame Oil", 1, "tbsp"),
        ],
        (250, 8, 30, 12),
    ),
    _meal(
        "Italian Pasta Primavera",
        "Pasta tossed with sauteed seasonal vegetables and parmesan.",
        "1. Cook the pasta al dente\n2. Saute the vegetables\n"
        "3. Combine with the pasta\n4. Top with parmesan",
        15,
        15,
        4,
        "Italian",
        [
            ("Pasta", 300, "g"),
            ("Zucchini", 1, "medium"),
            ("Cherry Tomatoes", 200, "g"),
            ("Bell Pepper", 1, "medium"),
            ("Parmesan Cheese", 50, "g"),
            ("Olive Oil", 3, "tbsp"),
        ],
        (400, 12, 60, 15),
    ),
    _meal(
        "Mexican Quinoa Bowl",
        "Quinoa with black beans, corn and fresh vegetables.",
        "1. Cook the quinoa\n2. Warm the beans and corn\n"
        "3. Chop the vegetables\n4. Assemble and top with avocado and lime",
        10,
        20,
        2,
        "Mexican",
        [
            ("Quinoa", 150, "g"),
            ("Black Beans", 200, "g"),
            ("Corn", 100, "g"),
            ("Cherry Tomatoes", 100, "g"),
            ("Avocado", 1, "medium"),
            ("Lime", 1, "medium"),
        ],
        (450, 15, 65, 18),
    ),
    _meal(
        "Teriyaki Salmon with Vegetables",
        "Salmon glazed with teriyaki sauce and steamed vegetables.",
        "1. Make the teriyaki sauce\n2. Marinate the salmon\n"
        "3. Steam the vegetables\n4. Pan-sear the salmon and glaze",
        15,
        20,
        2,
        "Japanese",
        [
            ("Salmon Fillets", 300, "g"),
            ("Soy Sauce", 3, "tbsp"),
            ("Honey", 2, "tbsp"),
            ("Garlic", 2, "cloves"),
            ("Broccoli", 150, "g"),
        ],
        (420, 35, 25, 22),
    ),
    _meal(
        "Vegetarian Chickpea Curry",
        "Chickpeas simmered with tomatoes and warm spices.",
        "1. Saute onion and garlic\n2. Toast the spices\n"
        "3. Add chickpeas and tomatoes\n4. Simmer and serve with rice",
        10,
        25,
        4,
        "Indian",
        [
            ("Chickpeas", 400, "g"),
            ("Chopped Tomatoes", 400, "g"),
            ("Onion", 1, "medium"),
            ("Garlic", 3, "cloves"),
            ("Curry Powder", 2, "tbsp"),
            ("Coconut Milk", 200, "ml"),
        ],
        (380, 14, 48, 15),
    ),
]
