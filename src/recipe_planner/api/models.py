"""Request and response models for the HTTP API."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from recipe_planner.domain.inference import GeneratedPlanning
from recipe_planner.domain.planning import (
    MealSlot,
    MealType,
    PlannedEvent,
    PlannedMeal,
    PlannedRecipe,
)
from recipe_planner.domain.recipes import Recipe
from recipe_planner.services.queries import ShoppingItem
from recipe_planner.services.user_settings import Preferences


class ApiModel(BaseModel):
    """Base model using camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlanEntryRequest(ApiModel):
    date: dt.date
    meal: MealSlot
    recipe_id: str
    meal_type: MealType


class PlannedRecipeOut(ApiModel):
    recipe_id: str
    meal_type: MealType
    recipe: Recipe | None = None


class PlannedMealOut(ApiModel):
    date: str
    meal: MealSlot
    recipes: list[PlannedRecipeOut]

    @classmethod
    def from_domain(
        cls,
        meal: PlannedMeal,
        resolved: list[tuple[PlannedRecipe, Recipe]] | None = None,
    ) -> "PlannedMealOut":
        """Build the response, embedding recipes when they were resolved."""
        if resolved is None:
            entries = [
                PlannedRecipeOut(recipe_id=item.recipe_id, meal_type=item.meal_type)
                for item in meal.recipes
            ]
        else:
            entries = [
                PlannedRecipeOut(
                    recipe_id=item.recipe_id, meal_type=item.meal_type, recipe=recipe
                )
                for item, recipe in resolved
            ]
        return cls(date=meal.date, meal=meal.meal, recipes=entries)


class EventCreateRequest(ApiModel):
    name: str = Field(min_length=1)
    start_date: dt.date
    duration: int = Field(default=1, ge=1)


class EventUpdateRequest(ApiModel):
    name: str | None = Field(default=None, min_length=1)
    start_date: dt.date | None = None
    duration: int | None = Field(default=None, ge=1)


class PlannedEventOut(ApiModel):
    id: str
    name: str
    start_date: str
    duration: int

    @classmethod
    def from_domain(cls, event: PlannedEvent) -> "PlannedEventOut":
        return cls(
            id=event.id,
            name=event.name,
            start_date=event.start_date,
            duration=event.duration,
        )


class DayPlanOut(ApiModel):
    """Everything planned on a single day."""

    date: str
    meals: list[PlannedMealOut]
    events: list[PlannedEventOut]


class WeekPlanOut(ApiModel):
    """Seven days of planning plus the number of filled lunch/dinner slots."""

    days: list[DayPlanOut]
    planned_slots: int


class EventPlanOut(ApiModel):
    """An event with the meals planned during its span."""

    event: PlannedEventOut
    meals: list[PlannedMealOut]


class ApplyPlanningRequest(ApiModel):
    start_date: dt.date
    planning: GeneratedPlanning
    duration: int | None = Field(default=None, ge=1)


class PreferencesOut(ApiModel):
    system_prompt: str
    background_image: str

    @classmethod
    def from_domain(cls, preferences: Preferences) -> "PreferencesOut":
        return cls(
            system_prompt=preferences.system_prompt,
            background_image=preferences.background_image,
        )


class PreferencesUpdate(ApiModel):
    system_prompt: str | None = None
    background_image: str | None = None


class GenerateRecipeRequest(ApiModel):
    user_input: str = Field(min_length=1)
    request_key: str | None = None


class ImportUrlRequest(ApiModel):
    url: str = Field(pattern=r"^https?://")
    request_key: str | None = None


class ImportPhotoRequest(ApiModel):
    photo_data_uri: str = Field(pattern=r"^data:image/[\w.+-]+;base64,")
    request_key: str | None = None


class GeneratePlanningRequest(ApiModel):
    duration: int = Field(ge=1, le=31)
    constraints: str = ""
    recipe_ids: list[str] | None = None
    request_key: str | None = None


class ShoppingItemOut(ApiModel):
    name: str
    quantities: list[str]
    recipe_ids: list[str]

    @classmethod
    def from_domain(cls, item: ShoppingItem) -> "ShoppingItemOut":
        return cls(
            name=item.name,
            quantities=list(item.quantities),
            recipe_ids=list(item.recipe_ids),
        )
