"""Tests for the recipe inference service."""

import asyncio

import pytest

from recipe_planner.domain.inference import GeneratedPlanning
from recipe_planner.domain.planning import MealSlot, MealType
from recipe_planner.domain.recipes import RecipeCategory, RecipeDraft
from recipe_planner.errors import PlanningGenerationError
from recipe_planner.services.inference import RecipeInferenceService, to_data_url
from recipe_planner.services.planning import PlanningStore, apply_generated_planning
from recipe_planner.services.recipes import RecipeBook
from tests.conftest import FakeInferenceClient, FakePageFetcher, make_recipe

DRAFT_PAYLOAD: dict[str, object] = {
    "title": "Tarte aux pommes",
    "description": "Une tarte simple",
    "category": "Dessert",
    "prepTime": 20,
    "cookTime": 35.0,
    "servings": 6,
    "ingredients": [{"name": "Pommes", "quantity": "4"}],
    "steps": ["Éplucher", "Cuire"],
}


def test_generate_recipe_returns_draft(
    inference_service: RecipeInferenceService, inference_client: FakeInferenceClient
) -> None:
    inference_client.payloads.append(DRAFT_PAYLOAD)

    draft = asyncio.run(
        inference_service.generate_recipe("une tarte facile", "Tu es un chef.")
    )

    assert draft.title == "Tarte aux pommes"
    assert draft.category is RecipeCategory.DESSERT
    assert draft.cook_time == 35
    call = inference_client.calls[0]
    assert call["instructions"] == "Tu es un chef."
    assert "une tarte facile" in call["prompt"]


def test_generate_recipe_empty_output_returns_empty_draft(
    inference_service: RecipeInferenceService,
) -> None:
    draft = asyncio.run(inference_service.generate_recipe("rien", "prompt"))

    assert draft == RecipeDraft()
    assert draft.is_empty()
    assert draft.model_dump(exclude_none=True) == {}


def test_partial_output_keeps_missing_fields_unset(
    inference_service: RecipeInferenceService, inference_client: FakeInferenceClient
) -> None:
    inference_client.payloads.append({"title": "Soupe", "servings": None})

    draft = asyncio.run(inference_service.generate_recipe("soupe", "prompt"))

    assert draft.title == "Soupe"
    assert draft.servings is None
    assert draft.ingredients is None


def test_import_from_url_sends_page_text(
    inference_service: RecipeInferenceService,
    inference_client: FakeInferenceClient,
    page_fetcher: FakePageFetcher,
) -> None:
    inference_client.payloads.append(DRAFT_PAYLOAD)

    draft = asyncio.run(
        inference_service.import_from_url("https://recettes.example.com/tarte")
    )

    assert draft.title == "Tarte aux pommes"
    assert page_fetcher.urls == ["https://recettes.example.com/tarte"]
    assert "200 g de farine" in inference_client.calls[0]["prompt"]


def test_import_from_url_empty_output_returns_empty_draft(
    inference_service: RecipeInferenceService,
) -> None:
    draft = asyncio.run(inference_service.import_from_url("https://example.com"))

    assert draft.is_empty()


def test_import_from_photo_accepts_bytes(
    inference_service: RecipeInferenceService, inference_client: FakeInferenceClient
) -> None:
    inference_client.payloads.append(DRAFT_PAYLOAD)

    asyncio.run(inference_service.import_from_photo(b"\x89PNG\r\n\x1a\nrest"))

    assert inference_client.calls[0]["image_data_url"].startswith(
        "data:image/png;base64,"
    )


def test_import_from_photo_rejects_non_data_uri(
    inference_service: RecipeInferenceService,
) -> None:
    with pytest.raises(ValueError):
        asyncio.run(inference_service.import_from_photo("https://example.com/a.jpg"))


def test_client_errors_propagate(
    inference_service: RecipeInferenceService, inference_client: FakeInferenceClient
) -> None:
    inference_client.error = RuntimeError("rate limited")

    with pytest.raises(RuntimeError):
        asyncio.run(inference_service.generate_recipe("x", "prompt"))


def test_generate_planning_validates_output(
    inference_service: RecipeInferenceService, inference_client: FakeInferenceClient
) -> None:
    inference_client.payloads.append(
        {
            "event_name": "Semaine légère",
            "meals": [
                {
                    "day": 1,
                    "meal": "lunch",
                    "meal_type": "Plat Principal",
                    "recipe_id": "R1",
                    "new_recipe": None,
                },
                {
                    "day": 2,
                    "meal": "Soir",
                    "meal_type": "Dessert",
                    "recipe_id": None,
                    "new_recipe": DRAFT_PAYLOAD,
                },
            ],
        }
    )

    planning = asyncio.run(
        inference_service.generate_planning([make_recipe()], 2, "léger")
    )

    assert planning.event_name == "Semaine légère"
    assert planning.duration == 2
    assert planning.meals[1].meal is MealSlot.DINNER
    assert planning.meals[1].new_recipe.title == "Tarte aux pommes"
    call = inference_client.calls[0]
    assert '"id": "R1"' in call["prompt"]
    assert "Duration: 2 days." in call["instructions"]


def test_generate_planning_empty_output_raises(
    inference_service: RecipeInferenceService,
) -> None:
    with pytest.raises(PlanningGenerationError):
        asyncio.run(inference_service.generate_planning([make_recipe()], 3, ""))


def test_apply_generated_planning(
    planning_store: PlanningStore, recipe_book: RecipeBook
) -> None:
    existing = recipe_book.create_recipe(RecipeDraft(title="Poulet rôti"))
    planning = GeneratedPlanning.model_validate(
        {
            "event_name": "Week-end",
            "meals": [
                {"day": 1, "meal": "lunch", "meal_type": "Plat Principal",
                 "recipe_id": existing.id},
                {"day": 2, "meal": "dinner", "meal_type": "Dessert",
                 "new_recipe": DRAFT_PAYLOAD},
                {"day": 2, "meal": "lunch", "meal_type": "Entrée",
                 "recipe_id": "unknown"},
            ],
        }
    )

    event = apply_generated_planning(
        planning, "2024-06-15", recipe_book, planning_store
    )

    assert event.name == "Week-end"
    assert (event.start_date, event.duration) == ("2024-06-15", 2)
    meals = planning_store.get_plan_for_event(event.id)
    assert [(meal.date, meal.meal) for meal in meals] == [
        ("2024-06-15", MealSlot.LUNCH),
        ("2024-06-16", MealSlot.DINNER),
    ]
    dessert = meals[1].recipes[0]
    assert dessert.meal_type is MealType.DESSERT
    assert recipe_book.get_recipe(dessert.recipe_id).title == "Tarte aux pommes"


def test_to_data_url_defaults_to_jpeg() -> None:
    assert to_data_url(b"unknown").startswith("data:image/jpeg;base64,")


def test_apply_generated_planning_keeps_requested_duration(
    planning_store: PlanningStore, recipe_book: RecipeBook
) -> None:
    planning = GeneratedPlanning.model_validate(
        {
            "eventName": "Semaine",
            "meals": [
                {"day": 1, "meal": "dinner", "mealType": "Dessert",
                 "newRecipe": DRAFT_PAYLOAD},
                {"day": 3, "meal": "lunch", "mealType": "Dessert",
                 "newRecipe": DRAFT_PAYLOAD},
            ],
        }
    )

    week = apply_generated_planning(
        planning, "2024-06-10", recipe_book, planning_store, duration=7
    )
    stretched = apply_generated_planning(
        planning, "2024-07-01", recipe_book, planning_store, duration=2
    )

    assert planning.duration == 3
    assert week.duration == 7
    assert planning_store.get_events_for_date("2024-06-16") == [week]
    assert stretched.duration == 3
