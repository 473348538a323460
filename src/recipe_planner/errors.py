"""Domain errors raised by stores and services."""


class StoreNotReadyError(RuntimeError):
    """Raised when a store is used before its durable state has been loaded."""

    def __init__(self, store_name: str) -> None:
        super().__init__(f"{store_name} is still loading")
        self.store_name = store_name


class RecipeNotFoundError(LookupError):
    """Raised when a recipe id does not exist in the recipe book."""

    def __init__(self, recipe_id: str) -> None:
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class PlanningGenerationError(RuntimeError):
    """Raised when the model returns no meal plan."""
