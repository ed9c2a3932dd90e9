"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from meal_planner.api.schemas import (
    FridgeItemCreate,
    FridgeItemUpdate,
    IngredientCreate,
    IngredientUpdate,
    MealCreate,
    MealUpdate,
    PlanEntryCreate,
    PlanEntryUpdate,
    QuantityLineIn,
    RatingCreate,
)
from meal_planner.app_logging import configure_logging
from meal_planner.containers import AppContainer
from meal_planner.domain.catalog import Ingredient, NutritionProfile, QuantityLine
from meal_planner.domain.errors import DataFetchError, NotFoundError
from meal_planner.domain.fridge import FridgeItem
from meal_planner.domain.planning import PlanEntry
from meal_planner.domain.recommendations import RecommendedMeal
from meal_planner.domain.ratings import RatingSummary
from meal_planner.domain.shopping import ShoppingListResult
from meal_planner.services.meals import MealView


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(NotFoundError)
    async def not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=404)

    @app.exception_handler(ValueError)
    async def invalid_request(_: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(DataFetchError)
    async def data_fetch_failed(_: Request, exc: DataFetchError) -> JSONResponse:
        logger.error("Upstream data source failed: %s", exc.source)
        return JSONResponse({"error": str(exc)}, status_code=500)

    def _container(request: Request) -> AppContainer:
        return request.app.state.container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/ingredients")
    async def list_ingredients(request: Request) -> dict[str, object]:
        """Return the ingredient catalog."""
        ingredients = _container(request).ingredient_service.list_ingredients()
        return {"ingredients": [_ingredient_payload(item) for item in ingredients]}

    @app.get("/ingredients/search")
    async def search_ingredients(
        request: Request, q: str = "", limit: int = 10
    ) -> dict[str, object]:
        """Search ingredients by name."""
        results = _container(request).ingredient_service.search(q, limit=limit)
        return {"results": [_ingredient_payload(item) for item in results]}

    @app.post("/ingredients")
    async def create_ingredient(
        body: IngredientCreate, request: Request
    ) -> dict[str, object]:
        """Create an ingredient."""
        nutrition = (
            NutritionProfile(**body.nutrition.model_dump()) if body.nutrition else None
        )
        ingredient = await _container(request).ingredient_service.create_ingredient(
            body.name, usda_fdc_id=body.usda_fdc_id, nutrition=nutrition
        )
        return _ingredient_payload(ingredient)

    @app.get("/ingredients/{ingredient_id}")
    async def get_ingredient(
        ingredient_id: UUID, request: Request
    ) -> dict[str, object]:
        """Return a single ingredient."""
        service = _container(request).ingredient_service
        ingredient = service.get_ingredient(ingredient_id)
        return _ingredient_payload(ingredient)

    @app.put("/ingredients/{ingredient_id}")
    async def update_ingredient(
        ingredient_id: UUID, body: IngredientUpdate, request: Request
    ) -> dict[str, object]:
        """Change an ingredient."""
        nutrition = (
            NutritionProfile(**body.nutrition.model_dump()) if body.nutrition else None
        )
        ingredient = _container(request).ingredient_service.update_ingredient(
            ingredient_id,
            name=body.name,
            usda_fdc_id=body.usda_fdc_id,
            nutrition=nutrition,
        )
        return _ingredient_payload(ingredient)

    @app.delete("/ingredients/{ingredient_id}")
    async def delete_ingredient(
        ingredient_id: UUID, request: Request
    ) -> dict[str, bool]:
        """Delete an ingredient that no meal uses."""
        _container(request).ingredient_service.delete_ingredient(ingredient_id)
        return {"success": True}

    @app.get("/meals")
    async def list_meals(
        request: Request, sort_by: str | None = None
    ) -> dict[str, object]:
        """Return meals with nutrition and fridge coverage."""
        views = _container(request).meal_service.list_meals(sort_by)
        return {"meals": [_meal_payload(view) for view in views]}

    @app.post("/meals")
    async def create_meal(body: MealCreate, request: Request) -> dict[str, object]:
        """Create a meal with its ingredient lines."""
        payload = body.model_dump(exclude={"ingredients"}, exclude_none=True)
        view = _container(request).meal_service.create_meal(
            payload, [_to_line(line) for line in body.ingredients]
        )
        return _meal_payload(view)

    @app.post("/meals/save")
    async def save_recommended_meal(
        body: RecommendedMeal, request: Request
    ) -> dict[str, object]:
        """Store a recommended meal in the catalog."""
        view = _container(request).meal_service.save_recommended(body)
        return {
            "success": True,
            "mealId": str(view.meal.id),
            "meal": _meal_payload(view),
        }

    @app.get("/meals/recommendations")
    async def recommend_meals(  # noqa: PLR0913
        request: Request,
        page: int = 1,
        page_size: int | None = None,
        cuisine: str | None = None,
        max_prep_time: int | None = None,
    ) -> dict[str, object]:
        """Return meal suggestions based on the fridge and liked meals."""
        state: AppContainer = _container(request)
        fridge_items = state.fridge_service.list_items()
        liked = state.meal_service.meal_names(state.rating_service.liked_meal_ids())
        result = await state.recommendation_service.recommend(
            fridge_items,
            liked,
            page=page,
            page_size=page_size or state.settings.recommendation_page_size,
            cuisine=cuisine,
            max_prep_time=max_prep_time,
        )
        return {
            "recommendations": [
                meal.model_dump(by_alias=True) for meal in result.items
            ],
            "total": result.total,
            "page": result.page,
            "pageSize": result.page_size,
        }

    @app.get("/meals/{meal_id}")
    async def get_meal(meal_id: UUID, request: Request) -> dict[str, object]:
        """Return a single meal."""
        return _meal_payload(_container(request).meal_service.get_meal(meal_id))

    @app.put("/meals/{meal_id}")
    async def update_meal(
        meal_id: UUID, body: MealUpdate, request: Request
    ) -> dict[str, object]:
        """Change a meal's details; ingredient lines are edited separately."""
        view = _container(request).meal_service.update_meal(
            meal_id, body.model_dump(exclude_unset=True)
        )
        return _meal_payload(view)

    @app.delete("/meals/{meal_id}")
    async def delete_meal(meal_id: UUID, request: Request) -> dict[str, bool]:
        """Delete a meal and its ingredient lines."""
        _container(request).meal_service.delete_meal(meal_id)
        return {"success": True}

    @app.post("/meals/{meal_id}/ingredients")
    async def add_meal_ingredient(
        meal_id: UUID, body: QuantityLineIn, request: Request
    ) -> dict[str, object]:
        """Add an ingredient line to a meal."""
        view = _container(request).meal_service.add_ingredient(
            meal_id, _to_line(body)
        )
        return _meal_payload(view)

    @app.delete("/meals/{meal_id}/ingredients/{ingredient_id}")
    async def remove_meal_ingredient(
        meal_id: UUID, ingredient_id: UUID, request: Request
    ) -> dict[str, object]:
        """Remove an ingredient from a meal."""
        view = _container(request).meal_service.remove_ingredient(
            meal_id, ingredient_id
        )
        return _meal_payload(view)

    @app.get("/meals/{meal_id}/coverage")
    async def meal_coverage(meal_id: UUID, request: Request) -> dict[str, object]:
        """Return how much of a meal the fridge covers."""
        coverage = _container(request).meal_service.meal_coverage(meal_id)
        return {"mealId": str(meal_id), "coverage": coverage}

    @app.get("/meals/{meal_id}/rating")
    async def rating_summary(meal_id: UUID, request: Request) -> dict[str, int]:
        """Return like and dislike counts for a meal."""
        return _rating_payload(_container(request).rating_service.summary(meal_id))

    @app.post("/meals/{meal_id}/rating")
    async def rate_meal(
        meal_id: UUID, body: RatingCreate, request: Request
    ) -> dict[str, object]:
        """Like or dislike a meal."""
        rating = _container(request).rating_service.rate(meal_id, body.rating)
        return {
            "id": str(rating.id),
            "meal_id": str(rating.meal_id),
            "rating": rating.liked,
        }

    @app.get("/fridge")
    async def list_fridge(request: Request) -> dict[str, object]:
        """Return fridge contents."""
        items = _container(request).fridge_service.list_items()
        return {"items": [_fridge_payload(item) for item in items]}

    @app.post("/fridge")
    async def add_fridge_item(
        body: FridgeItemCreate, request: Request
    ) -> dict[str, object]:
        """Add an ingredient quantity to the fridge."""
        item = _container(request).fridge_service.add_item(
            body.ingredient_id, body.quantity, body.unit
        )
        return _fridge_payload(item)

    @app.get("/fridge/{item_id}")
    async def get_fridge_item(item_id: UUID, request: Request) -> dict[str, object]:
        """Return a single fridge item."""
        return _fridge_payload(_container(request).fridge_service.get_item(item_id))

    @app.put("/fridge/{item_id}")
    async def update_fridge_item(
        item_id: UUID, body: FridgeItemUpdate, request: Request
    ) -> dict[str, object]:
        """Change the quantity of a fridge item."""
        item = _container(request).fridge_service.update_item(
            item_id, body.quantity, body.unit
        )
        return _fridge_payload(item)

    @app.delete("/fridge/{item_id}")
    async def delete_fridge_item(item_id: UUID, request: Request) -> dict[str, bool]:
        """Remove a fridge item."""
        _container(request).fridge_service.delete_item(item_id)
        return {"success": True}

    @app.get("/plan")
    async def list_plan(
        request: Request,
        start: date | None = None,
        end: date | None = None,
        week_of: date | None = None,
    ) -> dict[str, object]:
        """Return plan entries for a range, or for the week containing week_of."""
        plan_service = _container(request).plan_service
        if week_of is not None:
            entries = plan_service.list_week(week_of)
        else:
            entries = plan_service.list_entries(start, end)
        return {"entries": [_plan_payload(entry) for entry in entries]}

    @app.post("/plan")
    async def create_plan_entry(
        body: PlanEntryCreate, request: Request
    ) -> dict[str, object]:
        """Schedule a meal."""
        entry = _container(request).plan_service.schedule(
            body.meal_id, body.planned_on, body.meal_type
        )
        return _plan_payload(entry)

    @app.get("/plan/{entry_id}")
    async def get_plan_entry(entry_id: UUID, request: Request) -> dict[str, object]:
        """Return a single plan entry."""
        return _plan_payload(_container(request).plan_service.get_entry(entry_id))

    @app.put("/plan/{entry_id}")
    async def update_plan_entry(
        entry_id: UUID, body: PlanEntryUpdate, request: Request
    ) -> dict[str, object]:
        """Move a plan entry to another meal, date or slot."""
        entry = _container(request).plan_service.reschedule(
            entry_id,
            meal_id=body.meal_id,
            planned_on=body.planned_on,
            meal_slot=body.meal_type,
        )
        return _plan_payload(entry)

    @app.delete("/plan/{entry_id}")
    async def delete_plan_entry(entry_id: UUID, request: Request) -> dict[str, bool]:
        """Remove a plan entry."""
        _container(request).plan_service.remove(entry_id)
        return {"success": True}

    @app.get("/shopping")
    async def shopping_list(
        request: Request, start: date | None = None, end: date | None = None
    ) -> dict[str, object]:
        """Return the classified shopping list for the plan."""
        result = _container(request).shopping_service.build_shopping_list(start, end)
        return _shopping_payload(result)

    return app


def _to_line(line: QuantityLineIn) -> QuantityLine:
    return QuantityLine(
        ingredient_id=line.ingredient_id, quantity=line.quantity, unit=line.unit
    )


def _ingredient_payload(ingredient: Ingredient) -> dict[str, object]:
    nutrition = ingredient.nutrition
    return {
        "id": str(ingredient.id),
        "name": ingredient.name,
        "usda_fdc_id": ingredient.usda_fdc_id,
        "nutrition": (
            {
                "calories": nutrition.calories,
                "protein": nutrition.protein,
                "carbs": nutrition.carbs,
                "fat": nutrition.fat,
            }
            if nutrition
            else None
        ),
    }


def _meal_payload(view: MealView) -> dict[str, object]:
    meal = view.meal
    return {
        "id": str(meal.id),
        "name": meal.name,
        "description": meal.description,
        "instructions": meal.instructions,
        "prep_time": meal.prep_time_minutes,
        "cook_time": meal.cook_time_minutes,
        "created_at": meal.created_at.isoformat() if meal.created_at else None,
        "ingredients": [
            {
                "ingredient_id": str(line.ingredient_id),
                "name": line.ingredient.name if line.ingredient else None,
                "quantity": line.quantity,
                "unit": line.unit,
            }
            for line in meal.lines
        ],
        "nutrition": {
            "calories": view.nutrition.calories,
            "protein": view.nutrition.protein,
            "carbs": view.nutrition.carbs,
            "fat": view.nutrition.fat,
        },
        "fridgePercentage": view.coverage,
    }


def _fridge_payload(item: FridgeItem) -> dict[str, object]:
    return {
        "id": str(item.id),
        "ingredient_id": str(item.ingredient_id),
        "name": item.ingredient.name if item.ingredient else None,
        "quantity": item.quantity,
        "unit": item.unit,
    }


def _plan_payload(entry: PlanEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "meal_id": str(entry.meal_id),
        "date": entry.date.isoformat(),
        "meal_type": entry.meal_slot.value,
    }


def _rating_payload(summary: RatingSummary) -> dict[str, int]:
    return {
        "likes": summary.likes,
        "dislikes": summary.dislikes,
        "total": summary.total,
    }


def _shopping_payload(result: ShoppingListResult) -> dict[str, object]:
    return {
        "shoppingList": [
            {
                "ingredientId": str(item.ingredient_id),
                "name": item.name,
                "required": item.required,
                "unit": item.unit,
                "onHand": item.on_hand,
                "status": item.status.value,
            }
            for item in result.items
        ],
        "totalItems": result.total_items,
        "needToBuy": result.need_to_buy,
        "partial": result.partial,
        "inStock": result.in_stock,
    }
