"""Tests for recipe and plan queries."""

from datetime import date

import pytest

from recipe_planner.domain.planning import (
    MealSlot,
    MealType,
    PlannedEvent,
    PlannedMeal,
    PlannedRecipe,
)
from recipe_planner.domain.recipes import Ingredient, RecipeCategory
from recipe_planner.services.queries import (
    RecipeFilter,
    count_planned_slots,
    events_for_date,
    filter_recipes,
    parse_ingredient_list,
    plan_for_range,
    quick_search,
    recipe_categories,
    recipes_for_plan,
    resolve_plan,
    shopping_list,
    sort_by_meal_type,
    week_days,
)
from tests.conftest import make_recipe

RECIPES = [
    make_recipe("R1", "Poulet rôti", RecipeCategory.MAIN, 10, 60, 4),
    make_recipe(
        "R2", "Tarte aux pommes", RecipeCategory.DESSERT, 20, 35, 8,
        ["Pommes", "Farine", "Beurre"],
    ),
    make_recipe(
        "R3", "Salade niçoise", RecipeCategory.STARTER, 15, 0, 2,
        ["Thon", "Oeufs", "Tomates"],
    ),
    make_recipe(
        "R4", "Curry de légumes", RecipeCategory.MAIN, 15, 25, 4,
        ["Lait de coco", "Pois chiches", "Curry"],
    ),
]


def _ids(recipes) -> list[str]:
    return [recipe.id for recipe in recipes]


def test_open_filter_returns_everything() -> None:
    assert _ids(filter_recipes(RECIPES, RecipeFilter())) == ["R1", "R2", "R3", "R4"]


def test_search_matches_title_or_ingredient_case_insensitive() -> None:
    assert _ids(filter_recipes(RECIPES, RecipeFilter(search="TARTE"))) == ["R2"]
    assert _ids(filter_recipes(RECIPES, RecipeFilter(search="beurre"))) == ["R1", "R2"]


def test_category_filter_and_wildcard() -> None:
    assert _ids(filter_recipes(RECIPES, RecipeFilter(category="Plat Principal"))) == [
        "R1",
        "R4",
    ]
    assert len(filter_recipes(RECIPES, RecipeFilter(category="all"))) == 4


def test_total_time_and_servings() -> None:
    assert _ids(filter_recipes(RECIPES, RecipeFilter(max_total_time=40))) == [
        "R3",
        "R4",
    ]
    assert _ids(filter_recipes(RECIPES, RecipeFilter(min_servings=5))) == ["R2"]


def test_include_and_exclude_ingredients() -> None:
    criteria = RecipeFilter(
        include_ingredients=parse_ingredient_list("beurre, "),
        exclude_ingredients=parse_ingredient_list("pomme"),
    )

    assert _ids(filter_recipes(RECIPES, criteria)) == ["R1"]


def test_every_included_ingredient_is_required() -> None:
    criteria = RecipeFilter(include_ingredients=("thon", "coco"))

    assert filter_recipes(RECIPES, criteria) == []


def test_criteria_combine_with_and() -> None:
    criteria = RecipeFilter(
        search="curry", category="Plat Principal", max_total_time=40, min_servings=4
    )

    assert _ids(filter_recipes(RECIPES, criteria)) == ["R4"]


def test_lowering_max_time_never_grows_results() -> None:
    sizes = [
        len(filter_recipes(RECIPES, RecipeFilter(max_total_time=limit)))
        for limit in (240, 70, 55, 40, 15, 0)
    ]

    assert sizes == sorted(sizes, reverse=True)


@pytest.mark.parametrize(
    ("loose", "tight"),
    [
        (RecipeFilter(min_servings=2), RecipeFilter(min_servings=5)),
        (
            RecipeFilter(include_ingredients=("beurre",)),
            RecipeFilter(include_ingredients=("beurre", "thym")),
        ),
        (
            RecipeFilter(exclude_ingredients=("thon",)),
            RecipeFilter(exclude_ingredients=("thon", "pommes")),
        ),
        (RecipeFilter(search="t"), RecipeFilter(search="tarte")),
        (RecipeFilter(category="all"), RecipeFilter(category="Dessert")),
        (RecipeFilter(category=None), RecipeFilter(category="Plat Principal")),
    ],
)
def test_tightening_a_criterion_never_grows_results(
    loose: RecipeFilter, tight: RecipeFilter
) -> None:
    loose_ids = _ids(filter_recipes(RECIPES, loose))
    tight_ids = _ids(filter_recipes(RECIPES, tight))

    assert set(tight_ids) <= set(loose_ids)
    assert len(tight_ids) < len(loose_ids)


def test_parse_ingredient_list() -> None:
    parsed = parse_ingredient_list(" Tomates, , OIGNON ,ail")

    assert parsed == ("tomates", "oignon", "ail")
    assert parse_ingredient_list(None) == ()


def test_recipe_categories_keeps_first_seen_order() -> None:
    assert recipe_categories(RECIPES) == ["all", "Plat Principal", "Dessert", "Entrée"]


def test_quick_search_matches_title_or_category() -> None:
    assert _ids(quick_search(RECIPES, "dessert")) == ["R2"]
    assert _ids(quick_search(RECIPES, "salade")) == ["R3"]


def test_week_days_start_on_monday() -> None:
    days = week_days("2024-06-13")

    assert days[0] == date(2024, 6, 10)
    assert days[-1] == date(2024, 6, 16)
    assert len(days) == 7


def test_count_planned_slots_counts_lunch_and_dinner() -> None:
    meals = [
        _main_course("2024-06-10", MealSlot.LUNCH, "R1"),
        _main_course("2024-06-10", MealSlot.DINNER, "R2"),
        _main_course("2024-06-11", MealSlot.BREAKFAST, "R3"),
        _main_course("2024-06-20", MealSlot.LUNCH, "R1"),
    ]

    assert count_planned_slots(meals, week_days("2024-06-10")) == 2


def test_plan_for_range_and_events_for_date() -> None:
    meals = [
        _main_course("2024-06-12", MealSlot.LUNCH, "R1"),
        _main_course("2024-06-10", MealSlot.LUNCH, "R1"),
    ]
    events = [PlannedEvent("event-1", "Vacances", "2024-06-10", 2)]

    in_range = plan_for_range(meals, "2024-06-10", "2024-06-12")

    assert [meal.date for meal in in_range] == ["2024-06-10", "2024-06-12"]
    assert events_for_date(events, "2024-06-11") == events
    assert events_for_date(events, "2024-06-12") == []


def test_resolve_plan_sorts_and_skips_missing_recipes() -> None:
    meal = PlannedMeal(
        "2024-06-10",
        MealSlot.DINNER,
        (
            PlannedRecipe("R2", MealType.DESSERT),
            PlannedRecipe("deleted", MealType.MAIN),
            PlannedRecipe("R3", MealType.STARTER),
        ),
    )

    resolved = resolve_plan(meal, {recipe.id: recipe for recipe in RECIPES})

    assert [(entry.recipe_id, recipe.title) for entry, recipe in resolved] == [
        ("R3", "Salade niçoise"),
        ("R2", "Tarte aux pommes"),
    ]


def test_sort_by_meal_type() -> None:
    entries = [
        PlannedRecipe("a", MealType.DESSERT),
        PlannedRecipe("b", MealType.MAIN),
        PlannedRecipe("c", MealType.STARTER),
    ]

    assert [entry.recipe_id for entry in sort_by_meal_type(entries)] == ["c", "b", "a"]


def _main_course(day: str, slot: MealSlot, recipe_id: str) -> PlannedMeal:
    return PlannedMeal(day, slot, (PlannedRecipe(recipe_id, MealType.MAIN),))


def test_shopping_list_merges_names_case_insensitively() -> None:
    tarte = RECIPES[1].model_copy(
        update={
            "ingredients": [
                Ingredient(name="Pommes", quantity="4"),
                Ingredient(name="Beurre", quantity="100 g"),
            ]
        }
    )
    poulet = RECIPES[0].model_copy(
        update={
            "ingredients": [
                Ingredient(name="beurre ", quantity="30 g"),
                Ingredient(name="Sel"),
            ]
        }
    )

    items = shopping_list([tarte, poulet])

    assert [item.name for item in items] == ["Pommes", "Beurre", "Sel"]
    beurre = items[1]
    assert beurre.quantities == ("100 g", "30 g")
    assert beurre.recipe_ids == ("R2", "R1")
    assert items[2].quantities == ()


def test_shopping_list_counts_each_planned_occurrence() -> None:
    recipes = {recipe.id: recipe for recipe in RECIPES}
    meals = [
        _main_course("2024-06-10", MealSlot.LUNCH, "R1"),
        _main_course("2024-06-11", MealSlot.DINNER, "R1"),
        _main_course("2024-06-12", MealSlot.DINNER, "deleted"),
    ]

    planned = recipes_for_plan(meals, recipes)
    items = shopping_list(planned)

    assert _ids(planned) == ["R1", "R1"]
    assert items[0].name == "Poulet"
    assert items[0].quantities == ("1", "1")
    assert items[0].recipe_ids == ("R1",)
