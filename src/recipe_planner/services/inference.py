"""Recipe inference service: recipe generation, import and meal planning."""

import base64
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from recipe_planner.domain.inference import GeneratedPlanning, RecipeSummary
from recipe_planner.domain.recipes import Recipe, RecipeCategory, RecipeDraft
from recipe_planner.errors import PlanningGenerationError

_logger = logging.getLogger(__name__)

_CATEGORIES = [category.value for category in RecipeCategory]

_INGREDIENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "quantity": {"type": "string"},
    },
    "required": ["name", "quantity"],
    "additionalProperties": False,
}


def _nullable(schema: dict[str, object]) -> dict[str, object]:
    return {"anyOf": [schema, {"type": "null"}]}


RECIPE_DRAFT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "title": _nullable({"type": "string"}),
        "description": _nullable({"type": "string"}),
        "category": _nullable({"type": "string", "enum": _CATEGORIES}),
        "prepTime": _nullable({"type": "integer", "minimum": 0}),
        "cookTime": _nullable({"type": "integer", "minimum": 0}),
        "servings": _nullable({"type": "integer", "minimum": 1}),
        "ingredients": _nullable({"type": "array", "items": _INGREDIENT_SCHEMA}),
        "steps": _nullable({"type": "array", "items": {"type": "string"}}),
    },
    "required": [
        "title",
        "description",
        "category",
        "prepTime",
        "cookTime",
        "servings",
        "ingredients",
        "steps",
    ],
    "additionalProperties": False,
}

_NEW_RECIPE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "category": {"type": "string", "enum": _CATEGORIES},
        "prepTime": {"type": "integer", "minimum": 0},
        "cookTime": {"type": "integer", "minimum": 0},
        "servings": {"type": "integer", "minimum": 1},
        "ingredients": {"type": "array", "items": _INGREDIENT_SCHEMA},
        "steps": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "title",
        "description",
        "category",
        "prepTime",
        "cookTime",
        "servings",
        "ingredients",
        "steps",
    ],
    "additionalProperties": False,
}

PLANNING_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "event_name": {"type": "string"},
        "meals": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "day": {"type": "integer", "minimum": 1},
                    "meal": {"type": "string", "enum": ["lunch", "dinner"]},
                    "meal_type": {
                        "type": "string",
                        "enum": ["Entrée", "Plat Principal", "Dessert"],
                    },
                    "recipe_id": _nullable({"type": "string"}),
                    "new_recipe": _nullable(_NEW_RECIPE_SCHEMA),
                },
                "required": ["day", "meal", "meal_type", "recipe_id", "new_recipe"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["event_name", "meals"],
    "additionalProperties": False,
}

URL_IMPORT_INSTRUCTIONS = (
    "You are an expert recipe scraper. Extract the recipe published on the "
    "provided web page. Leave a field null when the page does not state it."
)
PHOTO_IMPORT_INSTRUCTIONS = (
    "You are an expert recipe transcriber. Extract the recipe details from the "
    "provided image. Leave a field null when the image does not show it."
)
PLANNING_INSTRUCTIONS = """You are an expert meal planner. Your task is to create a balanced meal plan.

CRITICAL RULES:
1. Only use recipes from the list IF they match the constraints: "{constraints}".
2. If you need a recipe that isn't in the list, set recipe_id to null and provide a complete new_recipe.
3. DO NOT include meta-talk, instructions, or disclaimers in the title or description.
4. The title must be ONLY the name of the dish.
5. new_recipe MUST contain non-empty ingredients and steps.

Duration: {duration} days.
Constraints: {constraints}"""


class InferenceClient(Protocol):
    """Interface for structured LLM generation."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object] | None:
        """Return structured output, or None when the model returned nothing."""


class PageFetcher(Protocol):
    """Interface for retrieving the readable text of a web page."""

    async def fetch_text(self, url: str) -> str:
        """Return the visible text of the page at ``url``."""


@dataclass
class RecipeInferenceService:
    """Prepares prompts for the model and validates its structured output."""

    client: InferenceClient
    page_fetcher: PageFetcher
    model: str
    reasoning_effort: str | None
    store: bool
    max_page_chars: int = 20_000

    async def generate_recipe(self, user_input: str, system_prompt: str) -> RecipeDraft:
        """Generate a recipe from a free-text request."""
        raw = await self._generate(
            instructions=system_prompt,
            prompt=(
                "Based on the user's request, generate a new recipe.\n\n"
                f"User Request: {user_input}"
            ),
            schema=RECIPE_DRAFT_SCHEMA,
            schema_name="recipe_draft",
        )
        return _to_draft(raw)

    async def import_from_url(self, url: str) -> RecipeDraft:
        """Extract a recipe from the page at ``url``."""
        page_text = await self.page_fetcher.fetch_text(url)
        raw = await self._generate(
            instructions=URL_IMPORT_INSTRUCTIONS,
            prompt=f"URL: {url}\n\nPage content:\n{page_text[: self.max_page_chars]}",
            schema=RECIPE_DRAFT_SCHEMA,
            schema_name="recipe_draft",
        )
        return _to_draft(raw)

    async def import_from_photo(self, photo: bytes | str) -> RecipeDraft:
        """Extract a recipe from a photo given as bytes or a data URI."""
        data_url = photo if isinstance(photo, str) else to_data_url(photo)
        if not data_url.startswith("data:"):
            raise ValueError("Photo must be a base64 data URI")
        raw = await self._generate(
            instructions=PHOTO_IMPORT_INSTRUCTIONS,
            prompt="Extract the recipe shown in this photo.",
            schema=RECIPE_DRAFT_SCHEMA,
            schema_name="recipe_draft",
            image_data_url=data_url,
        )
        return _to_draft(raw)

    async def generate_planning(
        self,
        recipes: Iterable[Recipe | RecipeSummary],
        duration: int,
        constraints: str,
    ) -> GeneratedPlanning:
        """Plan meals over ``duration`` days from the available recipes."""
        if duration < 1:
            raise ValueError("Planning duration must be at least one day")
        summaries = [_summarize(recipe) for recipe in recipes]
        available = json.dumps(
            [summary.model_dump() for summary in summaries], ensure_ascii=False
        )
        raw = await self._generate(
            instructions=PLANNING_INSTRUCTIONS.format(
                duration=duration, constraints=constraints
            ),
            prompt=f"Available Recipes: {available}\n\nGenerate the meal plan now.",
            schema=PLANNING_SCHEMA,
            schema_name="meal_planning",
        )
        if not raw:
            raise PlanningGenerationError("The model returned an empty meal plan")
        planning = GeneratedPlanning.model_validate(raw)
        _logger.info(
            "Planning generated: days=%s meals=%s", duration, len(planning.meals)
        )
        return planning

    async def _generate(
        self,
        *,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object] | None:
        return await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=instructions,
            prompt=prompt,
            schema=schema,
            schema_name=schema_name,
            image_data_url=image_data_url,
        )


def _to_draft(raw: dict[str, object] | None) -> RecipeDraft:
    """Validate model output, mapping an empty result to an empty draft."""
    if not raw:
        _logger.info("Model returned no recipe, using empty draft")
        return RecipeDraft()
    return RecipeDraft.model_validate(raw)


def _summarize(recipe: Recipe | RecipeSummary) -> RecipeSummary:
    if isinstance(recipe, RecipeSummary):
        return recipe
    return RecipeSummary(
        id=recipe.id,
        title=recipe.title,
        category=str(recipe.category),
        description=recipe.description,
    )


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
