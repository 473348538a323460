"""Pure query helpers over recipes and plans."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from recipe_planner.domain.planning import (
    MEAL_TYPE_ORDER,
    MealSlot,
    PlannedEvent,
    PlannedMeal,
    PlannedRecipe,
    to_day_key,
)
from recipe_planner.domain.recipes import Recipe

ALL_CATEGORIES = "all"
WEEK_SLOTS: tuple[MealSlot, ...] = (MealSlot.LUNCH, MealSlot.DINNER)


@dataclass(frozen=True)
class RecipeFilter:
    """Search criteria; every unset criterion lets all recipes through."""

    search: str = ""
    category: str | None = None
    max_total_time: int | None = None
    min_servings: int | None = None
    include_ingredients: tuple[str, ...] = field(default_factory=tuple)
    exclude_ingredients: tuple[str, ...] = field(default_factory=tuple)


def parse_ingredient_list(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated ingredient list into trimmed lowercase terms."""
    if not raw:
        return ()
    return tuple(
        term for term in (chunk.strip().lower() for chunk in raw.split(",")) if term
    )


def filter_recipes(recipes: Iterable[Recipe], criteria: RecipeFilter) -> list[Recipe]:
    """Return the recipes matching every criterion, in input order."""
    return [recipe for recipe in recipes if _matches(recipe, criteria)]


def _matches(recipe: Recipe, criteria: RecipeFilter) -> bool:
    ingredient_names = [item.name.lower() for item in recipe.ingredients]
    search = criteria.search.strip().lower()
    if search and not (
        search in recipe.title.lower()
        or any(search in name for name in ingredient_names)
    ):
        return False
    if criteria.category not in (None, "", ALL_CATEGORIES):
        if recipe.category != criteria.category:
            return False
    if (
        criteria.max_total_time is not None
        and recipe.total_time > criteria.max_total_time
    ):
        return False
    if criteria.min_servings is not None and recipe.servings < criteria.min_servings:
        return False
    for wanted in criteria.include_ingredients:
        if not any(wanted.lower() in name for name in ingredient_names):
            return False
    for unwanted in criteria.exclude_ingredients:
        if any(unwanted.lower() in name for name in ingredient_names):
            return False
    return True


def recipe_categories(recipes: Iterable[Recipe]) -> list[str]:
    """Return the category choices: the wildcard followed by categories in use."""
    seen = dict.fromkeys(str(recipe.category) for recipe in recipes)
    return [ALL_CATEGORIES, *seen]


def quick_search(recipes: Iterable[Recipe], query: str) -> list[Recipe]:
    """Match a query against recipe titles and categories."""
    needle = query.strip().lower()
    return [
        recipe
        for recipe in recipes
        if needle in recipe.title.lower() or needle in str(recipe.category).lower()
    ]


def plan_for_date(
    meals: Iterable[PlannedMeal], day: date | datetime | str
) -> list[PlannedMeal]:
    day_key = to_day_key(day)
    return [meal for meal in meals if meal.date == day_key]


def plan_for_range(
    meals: Iterable[PlannedMeal],
    start: date | datetime | str,
    end: date | datetime | str,
) -> list[PlannedMeal]:
    """Return the slot records between two days, both inclusive, by date."""
    start_key, end_key = to_day_key(start), to_day_key(end)
    return sorted(
        (meal for meal in meals if start_key <= meal.date <= end_key),
        key=lambda meal: meal.date,
    )


def events_for_date(
    events: Iterable[PlannedEvent], day: date | datetime | str
) -> list[PlannedEvent]:
    day_key = to_day_key(day)
    return [event for event in events if event.covers(day_key)]


def week_days(anchor: date | datetime | str) -> list[date]:
    """Return the seven days of the Monday-starting week containing ``anchor``."""
    day = date.fromisoformat(to_day_key(anchor))
    monday = day - timedelta(days=day.weekday())
    return [monday + timedelta(days=offset) for offset in range(7)]


def count_planned_slots(
    meals: Iterable[PlannedMeal],
    days: Iterable[date],
    slots: Iterable[MealSlot] = WEEK_SLOTS,
) -> int:
    """Count the (day, slot) pairs that hold at least one recipe."""
    day_keys = {to_day_key(day) for day in days}
    wanted = set(slots)
    return sum(
        1
        for meal in meals
        if meal.date in day_keys and meal.meal in wanted and meal.recipes
    )


def sort_by_meal_type(entries: Iterable[PlannedRecipe]) -> list[PlannedRecipe]:
    """Order entries starter first, then main, then dessert."""
    return sorted(entries, key=lambda entry: MEAL_TYPE_ORDER.index(entry.meal_type))


def resolve_plan(
    meal: PlannedMeal, recipes_by_id: Mapping[str, Recipe]
) -> list[tuple[PlannedRecipe, Recipe]]:
    """Pair entries with their recipes, skipping ids that no longer exist."""
    resolved: list[tuple[PlannedRecipe, Recipe]] = []
    for entry in sort_by_meal_type(meal.recipes):
        recipe = recipes_by_id.get(entry.recipe_id)
        if recipe is None:
            continue
        resolved.append((entry, recipe))
    return resolved


@dataclass(frozen=True)
class ShoppingItem:
    """One shopping-list line: an ingredient and every quantity asked for it."""

    name: str
    quantities: tuple[str, ...]
    recipe_ids: tuple[str, ...]


def shopping_list(recipes: Iterable[Recipe]) -> list[ShoppingItem]:
    """Merge ingredients by case-insensitive name, in first-seen order.

    Quantities are free text, so they are listed rather than summed. A recipe
    given twice (e.g. planned on two days) contributes its quantities twice.
    """
    names: dict[str, str] = {}
    quantities: dict[str, list[str]] = {}
    recipe_ids: dict[str, list[str]] = {}
    for recipe in recipes:
        for ingredient in recipe.ingredients:
            key = ingredient.name.strip().lower()
            if not key:
                continue
            names.setdefault(key, ingredient.name.strip())
            if ingredient.quantity.strip():
                quantities.setdefault(key, []).append(ingredient.quantity.strip())
            ids = recipe_ids.setdefault(key, [])
            if recipe.id not in ids:
                ids.append(recipe.id)
    return [
        ShoppingItem(
            name=name,
            quantities=tuple(quantities.get(key, ())),
            recipe_ids=tuple(recipe_ids[key]),
        )
        for key, name in names.items()
    ]


def recipes_for_plan(
    meals: Iterable[PlannedMeal], recipes_by_id: Mapping[str, Recipe]
) -> list[Recipe]:
    """Return the recipes behind planned meals, one per planned entry."""
    return [recipe for meal in meals for _, recipe in resolve_plan(meal, recipes_by_id)]
