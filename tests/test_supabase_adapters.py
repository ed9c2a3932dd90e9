"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID, uuid4

import pytest

from meal_planner.adapters.supabase_fridge_repository import SupabaseFridgeRepository
from meal_planner.adapters.supabase_ingredient_repository import (
    SupabaseIngredientRepository,
    parse_ingredient_row,
)
from meal_planner.adapters.supabase_meal_repository import SupabaseMealRepository
from meal_planner.adapters.supabase_plan_repository import SupabasePlanRepository
from meal_planner.adapters.supabase_rating_repository import SupabaseRatingRepository
from meal_planner.domain.catalog import QuantityLine
from meal_planner.domain.nutrition import NutritionTotals
from meal_planner.domain.planning import MealSlot
from meal_planner.services.nutrition import aggregate_nutrition


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("eq", column, value))
        return self

    def in_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("in", column, value))
        return self

    def ilike(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("ilike", column, value))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("gte", column, value))
        return self

    def lt(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("lt", column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _ingredient_row(name: str = "Apple", **overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": str(uuid4()),
        "name": name,
        "usda_fdc_id": None,
        "nutrition": {"calories": 52, "protein": 0.3, "carbs": 13.8, "fat": 0.2},
    }
    row.update(overrides)
    return row


def test_parse_ingredient_row_treats_bad_values_as_missing() -> None:
    ingredient = parse_ingredient_row(
        _ingredient_row(
            usda_fdc_id="1750340",
            nutrition={"calories": "52", "protein": True, "carbs": 13.8},
        )
    )

    assert ingredient.usda_fdc_id == 1750340
    assert ingredient.nutrition is not None
    assert ingredient.nutrition.calories is None
    assert ingredient.nutrition.protein is None
    assert ingredient.nutrition.carbs == 13.8
    assert ingredient.nutrition.fat is None
    assert parse_ingredient_row(_ingredient_row(nutrition=None)).nutrition is None


def test_supabase_ingredient_repository() -> None:
    client = FakeSupabaseClient()
    table = client.table("ingredient")
    apple = _ingredient_row()
    table.queue("select", [apple])
    table.queue("select", [apple])
    table.queue("insert", [_ingredient_row("Pear")])

    repository = SupabaseIngredientRepository(client)
    [found] = repository.get_ingredients({uuid4()})
    [searched] = repository.search_ingredients("app", 5)
    created = repository.create_ingredient({"name": "Pear"})

    assert found.name == "Apple"
    assert searched.nutrition is not None
    assert ("ilike", "name", "%app%") in table.last_filters
    assert created.name == "Pear"
    assert repository.get_ingredients(set()) == []


def test_supabase_ingredient_repository_create_failure() -> None:
    repository = SupabaseIngredientRepository(FakeSupabaseClient())

    with pytest.raises(RuntimeError, match="Failed to create ingredient"):
        repository.create_ingredient({"name": "Pear"})


def test_supabase_meal_repository_get_meals_groups_lines() -> None:
    client = FakeSupabaseClient()
    meal_id = str(uuid4())
    ingredient_id = str(uuid4())
    client.table("meal").queue(
        "select",
        [
            {
                "id": meal_id,
                "name": "Bolognese",
                "created_at": "2025-03-01T12:00:00+00:00",
                "nutrition": {"calories": 600, "protein": 30, "carbs": None},
            }
        ],
    )
    client.table("meal_ingredient").queue(
        "select",
        [
            {
                "id": str(uuid4()),
                "meal_id": meal_id,
                "ingredient_id": ingredient_id,
                "quantity": 500,
                "unit": "g",
            }
        ],
    )

    repository = SupabaseMealRepository(client)
    [meal] = repository.get_meals({uuid4()})

    assert meal.name == "Bolognese"
    assert meal.nutrition is None
    assert meal.created_at is not None
    assert [(str(item.ingredient_id), item.quantity) for item in meal.lines] == [
        (ingredient_id, 500.0)
    ]
    assert meal.lines[0].ingredient is None


def test_supabase_meal_repository_get_meal_resolves_ingredients() -> None:
    client = FakeSupabaseClient()
    apple = _ingredient_row()
    client.table("meal").queue(
        "select",
        [
            {
                "id": str(uuid4()),
                "name": "Fruit Bowl",
                "nutrition": {"calories": 52, "protein": 0.3, "carbs": 13.8, "fat": 0},
                "meal_ingredient": [
                    {
                        "ingredient_id": apple["id"],
                        "quantity": 100,
                        "unit": "g",
                        "ingredient": apple,
                    }
                ],
            }
        ],
    )

    meal = SupabaseMealRepository(client).get_meal(uuid4())

    assert meal is not None
    assert meal.nutrition is not None
    assert meal.nutrition.fat == 0
    assert meal.lines[0].ingredient is not None
    assert meal.lines[0].ingredient.name == "Apple"


def test_supabase_meal_repository_create_and_delete() -> None:
    client = FakeSupabaseClient()
    meal_id = str(uuid4())
    ingredient_id = uuid4()
    line_row = {"meal_id": meal_id, "ingredient_id": str(ingredient_id), "quantity": 2}
    client.table("meal").queue("insert", [{"id": meal_id, "name": "Toast"}])
    client.table("meal_ingredient").queue("insert", [line_row])
    client.table("meal").queue(
        "select", [{"id": meal_id, "name": "Toast", "meal_ingredient": [line_row]}]
    )

    repository = SupabaseMealRepository(client)
    meal = repository.create_meal(
        {"name": "Toast"},
        [QuantityLine(ingredient_id=ingredient_id, quantity=2, unit="slices")],
    )
    repository.delete_meal(meal.id)

    line_table = client.table("meal_ingredient")
    assert line_table.last_payload == [
        {
            "meal_id": meal_id,
            "ingredient_id": str(ingredient_id),
            "quantity": 2,
            "unit": "slices",
        }
    ]
    assert ("eq", "meal_id", meal_id) in line_table.last_filters
    assert ("eq", "id", meal_id) in client.table("meal").last_filters


def test_supabase_meal_repository_create_meal_resolves_line_nutrition() -> None:
    client = FakeSupabaseClient()
    apple = _ingredient_row()
    meal_row = {"id": str(uuid4()), "name": "Fruit Bowl", "nutrition": None}
    line_row = {
        "meal_id": meal_row["id"],
        "ingredient_id": apple["id"],
        "quantity": 100,
        "unit": "g",
    }
    client.table("meal").queue("insert", [meal_row])
    client.table("meal_ingredient").queue("insert", [line_row])
    client.table("meal").queue(
        "select",
        [{**meal_row, "meal_ingredient": [{**line_row, "ingredient": apple}]}],
    )

    meal = SupabaseMealRepository(client).create_meal(
        {"name": "Fruit Bowl"},
        [QuantityLine(ingredient_id=UUID(apple["id"]), quantity=100, unit="g")],
    )

    assert meal.lines[0].ingredient is not None
    assert aggregate_nutrition(meal.lines) == NutritionTotals(
        calories=52, protein=0.3, carbs=13.8, fat=0.2
    )


def test_supabase_meal_repository_create_meal_fails_without_read_back() -> None:
    client = FakeSupabaseClient()
    client.table("meal").queue("insert", [{"id": str(uuid4()), "name": "Toast"}])

    with pytest.raises(RuntimeError, match="Failed to load created meal"):
        SupabaseMealRepository(client).create_meal({"name": "Toast"}, [])


def test_supabase_meal_repository_ignores_boolean_stored_totals() -> None:
    client = FakeSupabaseClient()
    client.table("meal").queue(
        "select",
        [
            {
                "id": str(uuid4()),
                "name": "Broth",
                "nutrition": {"calories": True, "protein": 1, "carbs": 1, "fat": 1},
            }
        ],
    )

    meal = SupabaseMealRepository(client).get_meal(uuid4())

    assert meal is not None
    assert meal.nutrition is None


def test_supabase_meal_repository_update_meal() -> None:
    client = FakeSupabaseClient()
    meal_id = str(uuid4())
    table = client.table("meal")
    table.queue("update", [{"id": meal_id, "name": "Toast"}])
    table.queue("select", [{"id": meal_id, "name": "French Toast"}])

    repository = SupabaseMealRepository(client)
    meal = repository.update_meal(UUID(meal_id), {"name": "French Toast"})

    assert meal.name == "French Toast"
    assert ("eq", "id", meal_id) in table.last_filters
    with pytest.raises(RuntimeError, match="Failed to update meal"):
        repository.update_meal(UUID(meal_id), {"name": "Toast"})


def test_supabase_ingredient_repository_single_row_operations() -> None:
    client = FakeSupabaseClient()
    table = client.table("ingredient")
    apple = _ingredient_row()
    ingredient_id = UUID(apple["id"])
    table.queue("select", [apple])
    table.queue("update", [{**apple, "name": "Green Apple"}])
    client.table("meal_ingredient").queue("select", [{"id": str(uuid4())}])

    repository = SupabaseIngredientRepository(client)
    found = repository.get_ingredient(ingredient_id)
    updated = repository.update_ingredient(ingredient_id, {"name": "Green Apple"})

    assert found is not None
    assert found.name == "Apple"
    assert updated.name == "Green Apple"
    assert table.last_payload == {"name": "Green Apple"}
    assert repository.ingredient_in_use(ingredient_id) is True
    assert repository.ingredient_in_use(ingredient_id) is False
    assert repository.get_ingredient(uuid4()) is None


def test_supabase_ingredient_repository_delete_clears_fridge_first() -> None:
    client = FakeSupabaseClient()
    ingredient_id = uuid4()

    SupabaseIngredientRepository(client).delete_ingredient(ingredient_id)

    assert ("eq", "ingredient_id", str(ingredient_id)) in client.table(
        "fridge_item"
    ).last_filters
    assert ("eq", "id", str(ingredient_id)) in client.table("ingredient").last_filters


def test_supabase_fridge_repository() -> None:
    client = FakeSupabaseClient()
    table = client.table("fridge_item")
    ingredient = _ingredient_row("Milk")
    item_id = str(uuid4())
    row = {
        "id": item_id,
        "ingredient_id": ingredient["id"],
        "quantity": 1,
        "unit": "l",
        "ingredient": ingredient,
    }
    table.queue("select", [row])
    table.queue("update", [{**row, "quantity": 0.5}])

    repository = SupabaseFridgeRepository(client)
    [item] = repository.list_items()
    updated = repository.update_item(item.id, 0.5, "l")

    assert item.ingredient is not None
    assert item.ingredient.name == "Milk"
    assert updated.quantity == 0.5
    assert table.last_payload == {"quantity": 0.5, "unit": "l"}
    with pytest.raises(RuntimeError, match="Failed to add fridge item"):
        repository.add_item(uuid4(), 1, "l")


def _plan_row(meal_id: str | None, day: str, meal_type: str) -> dict[str, object]:
    return {"id": str(uuid4()), "meal_id": meal_id, "date": day, "meal_type": meal_type}


def test_supabase_plan_repository() -> None:
    client = FakeSupabaseClient()
    table = client.table("meal_plan")
    meal_id = str(uuid4())
    table.queue(
        "select",
        [
            _plan_row(meal_id, "2025-03-03", "Dinner"),
            _plan_row(None, "2025-03-04", "lunch"),
        ],
    )
    table.queue("insert", [_plan_row(meal_id, "2025-03-05", "breakfast")])

    repository = SupabasePlanRepository(client)
    entries = repository.list_entries(date(2025, 3, 3), date(2025, 3, 10))
    created = repository.create_entry(uuid4(), date(2025, 3, 5), MealSlot.BREAKFAST)

    assert [entry.meal_slot for entry in entries] == [MealSlot.DINNER]
    assert ("gte", "date", "2025-03-03") in table.last_filters
    assert ("lt", "date", "2025-03-10") in table.last_filters
    assert created.date == date(2025, 3, 5)
    assert table.last_payload["meal_type"] == "breakfast"


def test_supabase_rating_repository() -> None:
    client = FakeSupabaseClient()
    table = client.table("meal_rating")
    meal_id = str(uuid4())
    table.queue("insert", [{"id": str(uuid4()), "meal_id": meal_id, "rating": True}])
    table.queue(
        "select",
        [
            {"id": str(uuid4()), "meal_id": meal_id, "rating": True},
            {"id": str(uuid4()), "meal_id": meal_id, "rating": False},
        ],
    )

    repository = SupabaseRatingRepository(client)
    rating = repository.create_rating(uuid4(), True)
    ratings = repository.list_ratings(rating.meal_id)

    assert rating.liked is True
    assert [item.liked for item in ratings] == [True, False]
    assert ("eq", "meal_id", meal_id) in table.last_filters


def test_supabase_plan_repository_update_entry() -> None:
    client = FakeSupabaseClient()
    table = client.table("meal_plan")
    meal_id = str(uuid4())
    row = _plan_row(meal_id, "2025-03-06", "lunch")
    table.queue("update", [row])

    repository = SupabasePlanRepository(client)
    entry = repository.update_entry(
        UUID(str(row["id"])), {"date": "2025-03-06", "meal_type": "lunch"}
    )

    assert entry.date == date(2025, 3, 6)
    assert entry.meal_slot == MealSlot.LUNCH
    assert table.last_payload == {"date": "2025-03-06", "meal_type": "lunch"}
    assert ("eq", "id", row["id"]) in table.last_filters
    with pytest.raises(RuntimeError, match="Failed to update plan entry"):
        repository.update_entry(uuid4(), {"meal_type": "dinner"})
