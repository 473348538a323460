"""Recipe book owning the recipe collection."""

import logging
from dataclasses import dataclass, field
from uuid import uuid4

from pydantic import ValidationError

from recipe_planner.domain.recipes import Recipe, RecipeDraft
from recipe_planner.errors import RecipeNotFoundError, StoreNotReadyError
from recipe_planner.services.storage import (
    RECIPES_STORAGE_KEY,
    BlobStore,
    StoreState,
    read_snapshot,
    write_snapshot,
)

_logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass
class RecipeBook:
    """Recipe collection with snapshot persistence."""

    storage: BlobStore
    key: str = RECIPES_STORAGE_KEY
    state: StoreState = field(default=StoreState.LOADING, init=False)
    _recipes: dict[str, Recipe] = field(default_factory=dict, init=False, repr=False)

    def load(self) -> None:
        """Load the durable snapshot once and mark the book ready."""
        if self.state is StoreState.READY:
            return
        raw = read_snapshot(self.storage, self.key)
        self._recipes = {recipe.id: recipe for recipe in _parse_snapshot(raw)}
        self.state = StoreState.READY
        _logger.info("Recipes loaded: count=%s", len(self._recipes))

    def list_recipes(self) -> list[Recipe]:
        """Return recipes in insertion order."""
        self._require_ready()
        return list(self._recipes.values())

    def get_recipe(self, recipe_id: str) -> Recipe | None:
        """Return a recipe by id, if present."""
        self._require_ready()
        return self._recipes.get(recipe_id)

    def create_recipe(self, draft: RecipeDraft) -> Recipe:
        """Create a recipe from a draft, filling unset fields with defaults."""
        self._require_ready()
        if not draft.title or not draft.title.strip():
            raise ValueError("Recipe title must not be empty")
        recipe = Recipe(
            id=uuid4().hex,
            **draft.model_dump(exclude_none=True),
        )
        self._recipes[recipe.id] = recipe
        self._persist()
        return recipe

    def update_recipe(self, recipe_id: str, changes: RecipeDraft) -> Recipe:
        """Apply the fields set on ``changes`` to an existing recipe."""
        self._require_ready()
        current = self._recipes.get(recipe_id)
        if current is None:
            raise RecipeNotFoundError(recipe_id)
        if changes.title is not None and not changes.title.strip():
            raise ValueError("Recipe title must not be empty")
        payload = {
            **current.model_dump(),
            **changes.model_dump(exclude_none=True),
            "id": recipe_id,
        }
        updated = Recipe.model_validate(payload)
        self._recipes[recipe_id] = updated
        self._persist()
        return updated

    def delete_recipe(self, recipe_id: str) -> None:
        """Delete a recipe; plan entries that reference it are left in place."""
        self._require_ready()
        if self._recipes.pop(recipe_id, None) is None:
            return
        self._persist()

    def snapshot(self) -> dict[str, object]:
        """Serialize the full recipe collection."""
        return {
            "version": SNAPSHOT_VERSION,
            "recipes": [
                recipe.model_dump(mode="json", by_alias=True)
                for recipe in self._recipes.values()
            ],
        }

    def _persist(self) -> None:
        write_snapshot(self.storage, self.key, self.snapshot())

    def _require_ready(self) -> None:
        if self.state is not StoreState.READY:
            raise StoreNotReadyError("Recipe book")


def _parse_snapshot(raw: object) -> list[Recipe]:
    """Parse stored recipes; a bare list is accepted as an untagged snapshot."""
    if isinstance(raw, dict):
        rows = raw.get("recipes") or []
    elif isinstance(raw, list):
        rows = raw
    else:
        return []
    recipes: list[Recipe] = []
    for row in rows:
        try:
            recipes.append(Recipe.model_validate(row))
        except ValidationError:
            _logger.warning("Skipping malformed recipe: %r", row)
    return recipes
