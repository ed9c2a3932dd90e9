"""Domain errors."""


class DataFetchError(RuntimeError):
    """Raised when an upstream data source cannot be read."""

    def __init__(self, source: str) -> None:
        super().__init__(f"Failed to fetch {source}")
        self.source = source


class NotFoundError(LookupError):
    """Base class for missing records."""


class MealNotFoundError(NotFoundError):
    """Raised when a meal id does not exist."""


class PlanEntryNotFoundError(NotFoundError):
    """Raised when a plan entry id does not exist."""


class FridgeItemNotFoundError(NotFoundError):
    """Raised when a fridge item id does not exist."""


class IngredientNotFoundError(NotFoundError):
    """Raised when an ingredient id does not exist."""
