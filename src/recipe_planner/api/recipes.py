"""Recipe book endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from recipe_planner.api.models import ShoppingItemOut
from recipe_planner.domain.recipes import Recipe, RecipeDraft
from recipe_planner.errors import RecipeNotFoundError
from recipe_planner.services.queries import (
    RecipeFilter,
    filter_recipes,
    parse_ingredient_list,
    quick_search,
    recipe_categories,
    shopping_list,
)

if TYPE_CHECKING:
    from recipe_planner.containers import AppContainer

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("")
async def list_recipes(  # noqa: PLR0913
    request: Request,
    search: str = "",
    category: str | None = None,
    max_total_time: int | None = None,
    min_servings: int | None = None,
    include: str | None = None,
    exclude: str | None = None,
) -> list[Recipe]:
    """Return recipes matching the given filters."""
    container: AppContainer = request.app.state.container
    criteria = RecipeFilter(
        search=search,
        category=category,
        max_total_time=max_total_time,
        min_servings=min_servings,
        include_ingredients=parse_ingredient_list(include),
        exclude_ingredients=parse_ingredient_list(exclude),
    )
    return filter_recipes(container.recipe_book.list_recipes(), criteria)


@router.get("/categories")
async def list_categories(request: Request) -> list[str]:
    """Return the category filter choices."""
    container: AppContainer = request.app.state.container
    return recipe_categories(container.recipe_book.list_recipes())


@router.get("/quick-search")
async def quick_search_recipes(request: Request, q: str = "") -> list[Recipe]:
    """Search recipes by title or category for the quick-add dialog."""
    container: AppContainer = request.app.state.container
    return quick_search(container.recipe_book.list_recipes(), q)


@router.get("/shopping-list")
async def recipes_shopping_list(
    request: Request, ids: str = ""
) -> list[ShoppingItemOut]:
    """Merge the ingredients of the comma-separated recipe ids."""
    container: AppContainer = request.app.state.container
    book = container.recipe_book
    wanted = [chunk.strip() for chunk in ids.split(",") if chunk.strip()]
    recipes = [
        recipe
        for recipe in (book.get_recipe(recipe_id) for recipe_id in wanted)
        if recipe is not None
    ]
    return [ShoppingItemOut.from_domain(item) for item in shopping_list(recipes)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_recipe(draft: RecipeDraft, request: Request) -> Recipe:
    """Create a recipe from a complete or imported draft."""
    container: AppContainer = request.app.state.container
    try:
        return container.recipe_book.create_recipe(draft)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


@router.get("/{recipe_id}")
async def get_recipe(recipe_id: str, request: Request) -> Recipe:
    """Return a single recipe."""
    container: AppContainer = request.app.state.container
    recipe = container.recipe_book.get_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return recipe


@router.put("/{recipe_id}")
async def update_recipe(
    recipe_id: str, changes: RecipeDraft, request: Request
) -> Recipe:
    """Update the fields sent in the body."""
    container: AppContainer = request.app.state.container
    try:
        return container.recipe_book.update_recipe(recipe_id, changes)
    except RecipeNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc


@router.delete("/{recipe_id}")
async def delete_recipe(recipe_id: str, request: Request) -> dict[str, str]:
    """Delete a recipe; planned meals keep their reference."""
    container: AppContainer = request.app.state.container
    container.recipe_book.delete_recipe(recipe_id)
    return {"status": "ok"}
