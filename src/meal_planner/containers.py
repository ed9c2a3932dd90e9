"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_planner.adapters.fdc_client import HttpxFdcClient
from meal_planner.adapters.openai_recommendation_client import (
    OpenAIRecommendationClient,
)
from meal_planner.adapters.supabase_fridge_repository import SupabaseFridgeRepository
from meal_planner.adapters.supabase_ingredient_repository import (
    SupabaseIngredientRepository,
)
from meal_planner.adapters.supabase_meal_repository import SupabaseMealRepository
from meal_planner.adapters.supabase_plan_repository import SupabasePlanRepository
from meal_planner.adapters.supabase_rating_repository import SupabaseRatingRepository
from meal_planner.config import Settings
from meal_planner.services.cache import InMemoryCache
from meal_planner.services.food_data import FoodDataService
from meal_planner.services.fridge import FridgeService
from meal_planner.services.ingredients import IngredientService
from meal_planner.services.meals import MealService
from meal_planner.services.plan import PlanService
from meal_planner.services.ratings import RatingService
from meal_planner.services.recommendations import RecommendationService
from meal_planner.services.shopping import ShoppingService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ingredient_service: IngredientService
    meal_service: MealService
    fridge_service: FridgeService
    plan_service: PlanService
    rating_service: RatingService
    shopping_service: ShoppingService
    recommendation_service: RecommendationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    ingredient_repository = SupabaseIngredientRepository(supabase_client)
    meal_repository = SupabaseMealRepository(supabase_client)
    fridge_repository = SupabaseFridgeRepository(supabase_client)
    plan_repository = SupabasePlanRepository(supabase_client)
    rating_repository = SupabaseRatingRepository(supabase_client)

    fdc_client = None
    food_data_service = None
    if resolved_settings.fdc_api_key:
        fdc_client = HttpxFdcClient.create(
            api_key=resolved_settings.fdc_api_key,
            base_url=resolved_settings.fdc_base_url,
        )
        food_data_service = FoodDataService(
            fdc_client=fdc_client, cache=InMemoryCache()
        )

    recommendation_client = None
    if resolved_settings.openai_api_key:
        recommendation_client = OpenAIRecommendationClient.create(
            resolved_settings.openai_api_key
        )

    fridge_service = FridgeService(fridge_repository)

    async def close_resources() -> None:
        if fdc_client is not None:
            await fdc_client.close()
        if recommendation_client is not None:
            await recommendation_client.close()

    return AppContainer(
        settings=resolved_settings,
        ingredient_service=IngredientService(
            ingredient_repository, food_data_service=food_data_service
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
            client=recommendation_client,
            model=resolved_settings.openai_model,
            store=resolved_settings.openai_store,
        ),
        close_resources=close_resources,
    )
