"""Structured outputs for model-generated meal plans."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from recipe_planner.domain.planning import MealSlot, MealType, parse_meal_slot
from recipe_planner.domain.recipes import RecipeDraft


class GeneratedMeal(BaseModel):
    """One meal assignment proposed by the planner model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    day: int = Field(ge=1)
    meal: MealSlot
    meal_type: MealType
    recipe_id: str | None = None
    new_recipe: RecipeDraft | None = None

    @field_validator("meal", mode="before")
    @classmethod
    def _canonical_slot(cls, value: object) -> MealSlot:
        return parse_meal_slot(value)


class GeneratedPlanning(BaseModel):
    """Event name plus ordered meal assignments for a multi-day plan."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_name: str
    meals: list[GeneratedMeal]

    @property
    def duration(self) -> int:
        """Number of days covered by the plan."""
        return max((meal.day for meal in self.meals), default=1)


class RecipeSummary(BaseModel):
    """Recipe fields sent to the planner model."""

    id: str
    title: str
    category: str
    description: str = ""
