"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import pytest

from meal_planner.adapters.fdc_client import FdcClient
from meal_planner.config import Settings
from meal_planner.containers import AppContainer
from meal_planner.domain.catalog import (
    Ingredient,
    Meal,
    NutritionProfile,
    QuantityLine,
)
from meal_planner.domain.fridge import FridgeItem
from meal_planner.domain.nutrition import NutritionTotals
from meal_planner.domain.planning import MealSlot, PlanEntry
from meal_planner.domain.ratings import MealRating
from meal_planner.services.cache import InMemoryCache
from meal_planner.services.food_data import FoodDataService
from meal_planner.services.fridge import FridgeRepository, FridgeService
from meal_planner.services.ingredients import IngredientRepository, IngredientService
from meal_planner.services.meals import MealRepository, MealService
from meal_planner.services.plan import PlanRepository, PlanService
from meal_planner.services.ratings import RatingRepository, RatingService
from meal_planner.services.recommendations import (
    RecommendationClient,
    RecommendationService,
)
from meal_planner.services.shopping import ShoppingService


def make_ingredient(
    name: str,
    calories: float | None = None,
    protein: float | None = None,
    carbs: float | None = None,
    fat: float | None = None,
) -> Ingredient:
    nutrition = None
    if any(value is not None for value in (calories, protein, carbs, fat)):
        nutrition = NutritionProfile(
            calories=calories, protein=protein, carbs=carbs, fat=fat
        )
    return Ingredient(id=uuid4(), name=name, nutrition=nutrition)


def line(ingredient: Ingredient, quantity: float, unit: str = "g") -> QuantityLine:
    return QuantityLine(
        ingredient_id=ingredient.id, quantity=quantity, unit=unit, ingredient=ingredient
    )


@dataclass
class InMemoryIngredientRepository(IngredientRepository):
    """In-memory ingredient repository for tests."""

    ingredients: dict[UUID, Ingredient] = field(default_factory=dict)
    fail: bool = False
    meal_repository: "InMemoryMealRepository | None" = field(
        default=None, repr=False, compare=False
    )

    def add(self, *ingredients: Ingredient) -> None:
        for ingredient in ingredients:
            self.ingredients[ingredient.id] = ingredient

    def list_ingredients(self) -> list[Ingredient]:
        return list(self.ingredients.values())

    def get_ingredients(self, ingredient_ids: set[UUID]) -> list[Ingredient]:
        if self.fail:
            raise RuntimeError("ingredient store unavailable")
        return [
            ingredient
            for ingredient_id, ingredient in self.ingredients.items()
            if ingredient_id in ingredient_ids
        ]

    def search_ingredients(self, query: str, limit: int) -> list[Ingredient]:
        lowered = query.lower()
        return [
            ingredient
            for ingredient in self.ingredients.values()
            if lowered in ingredient.name.lower()
        ][:limit]

    def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        raw = payload.get("nutrition")
        ingredient = Ingredient(
            id=uuid4(),
            name=str(payload["name"]),
            nutrition=NutritionProfile(**raw) if isinstance(raw, dict) else None,
            usda_fdc_id=payload.get("usda_fdc_id"),
        )
        self.ingredients[ingredient.id] = ingredient
        return ingredient

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        return self.ingredients.get(ingredient_id)

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        changes = dict(payload)
        if isinstance(changes.get("nutrition"), dict):
            changes["nutrition"] = NutritionProfile(**changes["nutrition"])
        ingredient = replace(self.ingredients[ingredient_id], **changes)
        self.ingredients[ingredient_id] = ingredient
        return ingredient

    def ingredient_in_use(self, ingredient_id: UUID) -> bool:
        if self.meal_repository is None:
            return False
        return any(
            item.ingredient_id == ingredient_id
            for meal in self.meal_repository.meals.values()
            for item in meal.lines
        )

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        self.ingredients.pop(ingredient_id, None)


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository; lines resolve against the ingredient store."""

    ingredient_repository: InMemoryIngredientRepository
    meals: dict[UUID, Meal] = field(default_factory=dict)
    fail: bool = False

    def __post_init__(self) -> None:
        self.ingredient_repository.meal_repository = self

    def add(self, meal: Meal) -> Meal:
        self.meals[meal.id] = meal
        return meal

    def _resolved(self, meal: Meal) -> Meal:
        store = self.ingredient_repository.ingredients
        return replace(
            meal,
            lines=[
                replace(item, ingredient=store.get(item.ingredient_id))
                for item in meal.lines
            ],
        )

    def list_meals(self) -> list[Meal]:
        return [self._resolved(meal) for meal in self.meals.values()]

    def get_meal(self, meal_id: UUID) -> Meal | None:
        meal = self.meals.get(meal_id)
        return self._resolved(meal) if meal else None

    def get_meals(self, meal_ids: set[UUID]) -> list[Meal]:
        if self.fail:
            raise RuntimeError("meal store unavailable")
        return [
            replace(
                meal,
                lines=[replace(item, ingredient=None) for item in meal.lines],
            )
            for meal_id, meal in self.meals.items()
            if meal_id in meal_ids
        ]

    def create_meal(
        self, payload: dict[str, object], lines: list[QuantityLine]
    ) -> Meal:
        meal = Meal(
            id=uuid4(),
            name=str(payload["name"]),
            lines=list(lines),
            description=payload.get("description"),
            instructions=payload.get("instructions"),
            prep_time_minutes=payload.get("prep_time"),
            cook_time_minutes=payload.get("cook_time"),
            nutrition=(
                NutritionTotals(**payload["nutrition"])
                if isinstance(payload.get("nutrition"), dict)
                else None
            ),
            created_at=datetime.now(tz=UTC),
        )
        self.meals[meal.id] = meal
        # Read back like the Supabase adapter does.
        return self.get_meal(meal.id)

    def update_meal(self, meal_id: UUID, payload: dict[str, object]) -> Meal:
        columns = {
            "name": "name",
            "description": "description",
            "instructions": "instructions",
            "prep_time": "prep_time_minutes",
            "cook_time": "cook_time_minutes",
        }
        self.meals[meal_id] = replace(
            self.meals[meal_id],
            **{columns[key]: value for key, value in payload.items()},
        )
        return self.get_meal(meal_id)

    def delete_meal(self, meal_id: UUID) -> None:
        self.meals.pop(meal_id, None)

    def add_ingredient(self, meal_id: UUID, line: QuantityLine) -> None:
        meal = self.meals[meal_id]
        self.meals[meal_id] = replace(meal, lines=[*meal.lines, line])

    def remove_ingredient(self, meal_id: UUID, ingredient_id: UUID) -> None:
        meal = self.meals[meal_id]
        self.meals[meal_id] = replace(
            meal,
            lines=[item for item in meal.lines if item.ingredient_id != ingredient_id],
        )


@dataclass
class InMemoryFridgeRepository(FridgeRepository):
    """In-memory fridge repository for tests."""

    items: dict[UUID, FridgeItem] = field(default_factory=dict)
    fail: bool = False

    def stock(self, ingredient: Ingredient, quantity: float, unit: str = "g") -> None:
        item = FridgeItem(
            id=uuid4(),
            ingredient_id=ingredient.id,
            quantity=quantity,
            unit=unit,
            ingredient=ingredient,
        )
        self.items[item.id] = item

    def list_items(self) -> list[FridgeItem]:
        if self.fail:
            raise RuntimeError("fridge store unavailable")
        return list(self.items.values())

    def get_item(self, item_id: UUID) -> FridgeItem | None:
        return self.items.get(item_id)

    def add_item(self, ingredient_id: UUID, quantity: float, unit: str) -> FridgeItem:
        item = FridgeItem(
            id=uuid4(), ingredient_id=ingredient_id, quantity=quantity, unit=unit
        )
        self.items[item.id] = item
        return item

    def update_item(self, item_id: UUID, quantity: float, unit: str) -> FridgeItem:
        item = replace(self.items[item_id], quantity=quantity, unit=unit)
        self.items[item_id] = item
        return item

    def delete_item(self, item_id: UUID) -> None:
        self.items.pop(item_id, None)


@dataclass
class InMemoryPlanRepository(PlanRepository):
    """In-memory plan repository for tests."""

    entries: dict[UUID, PlanEntry] = field(default_factory=dict)
    fail: bool = False

    def schedule(
        self,
        meal: Meal | UUID,
        planned_on: date = date(2025, 3, 3),
        slot: MealSlot = MealSlot.DINNER,
    ) -> PlanEntry:
        meal_id = meal.id if isinstance(meal, Meal) else meal
        entry = PlanEntry(id=uuid4(), date=planned_on, meal_slot=slot, meal_id=meal_id)
        self.entries[entry.id] = entry
        return entry

    def list_entries(
        self, start: date | None = None, end: date | None = None
    ) -> list[PlanEntry]:
        if self.fail:
            raise RuntimeError("plan store unavailable")
        return sorted(
            (
                entry
                for entry in self.entries.values()
                if (start is None or entry.date >= start)
                and (end is None or entry.date < end)
            ),
            key=lambda entry: entry.date,
        )

    def get_entry(self, entry_id: UUID) -> PlanEntry | None:
        return self.entries.get(entry_id)

    def create_entry(
        self, meal_id: UUID, planned_on: date, meal_slot: MealSlot
    ) -> PlanEntry:
        return self.schedule(meal_id, planned_on, meal_slot)

    def update_entry(self, entry_id: UUID, changes: dict[str, object]) -> PlanEntry:
        entry = self.entries[entry_id]
        if "meal_id" in changes:
            entry = replace(entry, meal_id=UUID(str(changes["meal_id"])))
        if "date" in changes:
            entry = replace(entry, date=date.fromisoformat(str(changes["date"])))
        if "meal_type" in changes:
            entry = replace(entry, meal_slot=MealSlot(changes["meal_type"]))
        self.entries[entry_id] = entry
        return entry

    def delete_entry(self, entry_id: UUID) -> None:
        self.entries.pop(entry_id, None)


@dataclass
class InMemoryRatingRepository(RatingRepository):
    """In-memory rating repository for tests."""

    ratings: list[MealRating] = field(default_factory=list)

    def create_rating(self, meal_id: UUID, liked: bool) -> MealRating:
        rating = MealRating(id=uuid4(), meal_id=meal_id, liked=liked)
        self.ratings.append(rating)
        return rating

    def list_ratings(self, meal_id: UUID | None = None) -> list[MealRating]:
        return [
            rating
            for rating in self.ratings
            if meal_id is None or rating.meal_id == meal_id
        ]


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    food_payload: dict[str, object] = field(
        default_factory=lambda: {
            "fdcId": 171077,
            "description": "Chicken, broilers or fryers, breast, meat only, raw",
            "foodNutrients": [
                {"nutrient": {"id": 1008, "number": "208"}, "amount": 165},
                {"nutrient": {"id": 1003, "number": "203"}, "amount": 31},
                {"nutrient": {"id": 1004, "number": "204"}, "amount": 3.6},
                {"nutrient": {"id": 1005, "number": "205"}, "amount": 0},
            ],
        }
    )
    food_calls: int = 0
    fail: bool = False

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        return {
            "foods": [
                {
                    "fdcId": self.food_payload["fdcId"],
                    "description": self.food_payload["description"],
                    "dataType": "Foundation",
                }
            ]
        }

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_calls += 1
        if self.fail:
            raise RuntimeError("fdc unavailable")
        return self.food_payload


@dataclass
class FakeRecommendationClient(RecommendationClient):
    """Fake recommendation client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "recommendations": [
                {
                    "name": "Beef Tacos",
                    "description": "Spiced ground beef in corn tortillas",
                    "instructions": "1. Brown the beef\n2. Fill the tortillas",
                    "prepTime": 10,
                    "cookTime": 15,
                    "servings": 4,
                    "cuisine": "Mexican",
                    "ingredients": [
                        {"name": "Ground Beef", "quantity": 500, "unit": "g"}
                    ],
                    "nutrition": {
                        "calories": 520,
                        "protein": 32,
                        "carbs": 40,
                        "fat": 24,
                    },
                }
            ]
        }
    )
    prompts: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def generate(
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        openai_api_key="openai-key",
        fdc_api_key="fdc-key",
    )


@pytest.fixture
def ingredient_repository() -> InMemoryIngredientRepository:
    return InMemoryIngredientRepository()


@pytest.fixture
def meal_repository(
    ingredient_repository: InMemoryIngredientRepository,
) -> InMemoryMealRepository:
    return InMemoryMealRepository(ingredient_repository)


@pytest.fixture
def fridge_repository() -> InMemoryFridgeRepository:
    return InMemoryFridgeRepository()


@pytest.fixture
def plan_repository() -> InMemoryPlanRepository:
    return InMemoryPlanRepository()


@pytest.fixture
def rating_repository() -> InMemoryRatingRepository:
    return InMemoryRatingRepository()


@pytest.fixture
def recommendation_client() -> FakeRecommendationClient:
    return FakeRecommendationClient()


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    ingredient_repository: InMemoryIngredientRepository,
    meal_repository: InMemoryMealRepository,
    fridge_repository: InMemoryFridgeRepository,
    plan_repository: InMemoryPlanRepository,
    rating_repository: InMemoryRatingRepository,
    recommendation_client: FakeRecommendationClient,
) -> AppContainer:
    fridge_service = FridgeService(fridge_repository)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ingredient_service=IngredientService(
            ingredient_repository,
            food_data_service=FoodDataService(
                fdc_client=FakeFdcClient(), cache=InMemoryCache()
            ),
        ),
        meal_service=MealService(
            meal_repository, fridge_service, ingredient_repository
        ),
        fridge_service=fridge_service,
        plan_service=PlanService(plan_repository, meal_repository),
        rating_service=RatingService(rating_repository, meal_repository),
        shopping_service=ShoppingService(
            plan_repository=plan_repository,
            meal_repository=meal_repository,
            ingredient_repository=ingredient_repository,
            fridge_repository=fridge_repository,
        ),
        recommendation_service=RecommendationService(
            client=recommendation_client, model=settings.openai_model
        ),
        close_resources=close_resources,
    )
