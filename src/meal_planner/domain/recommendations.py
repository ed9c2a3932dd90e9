"""Models for generated meal recommendations."""

from pydantic import BaseModel, ConfigDict, Field


class RecommendedIngredient(BaseModel):
    """Ingredient line of a recommended meal."""

    name: str
    quantity: float = Field(ge=0.0)
    unit: str


class RecommendedNutrition(BaseModel):
    """Estimated nutrition of a recommended meal."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


class RecommendedMeal(BaseModel):
    """A meal suggested from the current fridge contents."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    instructions: str
    prep_time: int = Field(alias="prepTime", ge=0)
    cook_time: int = Field(alias="cookTime", ge=0)
    servings: int = Field(ge=1)
    cuisine: str
    ingredients: list[RecommendedIngredient]
    nutrition: RecommendedNutrition


class RecommendationBatch(BaseModel):
    """Structured output for recommendation generation."""

    recommendations: list[RecommendedMeal]


class RecommendationPage(BaseModel):
    """One page of filtered recommendations."""

    items: list[RecommendedMeal]
    total: int
    page: int
    page_size: int
