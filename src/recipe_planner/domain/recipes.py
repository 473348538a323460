"""Recipe models shared by the recipe book and the inference service."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RecipeCategory(StrEnum):
    """Recipe categories offered by the application."""

    STARTER = "Entrée"
    MAIN = "Plat Principal"
    DESSERT = "Dessert"
    DRINK = "Boisson"
    APERITIF = "Apéritif"
    OTHER = "Autre"


class Ingredient(BaseModel):
    """Ingredient line with a free-text quantity."""

    name: str
    quantity: str = ""

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_as_text(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, int | float):
            return f"{value:g}"
        return value


class RecipeDraft(BaseModel):
    """Partial recipe, e.g. what the model could extract from a page."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    description: str | None = None
    category: RecipeCategory | None = None
    prep_time: int | None = Field(default=None, ge=0)
    cook_time: int | None = Field(default=None, ge=0)
    servings: int | None = Field(default=None, ge=1)
    ingredients: list[Ingredient] | None = None
    steps: list[str] | None = None
    image_url: str | None = None

    @field_validator("prep_time", "cook_time", "servings", mode="before")
    @classmethod
    def _round_numbers(cls, value: object) -> object:
        if isinstance(value, float):
            return round(value)
        return value

    def is_empty(self) -> bool:
        """Return True when no field was filled in."""
        return not self.model_dump(exclude_none=True)


class Recipe(BaseModel):
    """A complete recipe stored in the recipe book."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    description: str = ""
    category: RecipeCategory = RecipeCategory.OTHER
    prep_time: int = Field(default=0, ge=0)
    cook_time: int = Field(default=0, ge=0)
    servings: int = Field(default=1, ge=1)
    ingredients: list[Ingredient] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    image_url: str | None = None

    @property
    def total_time(self) -> int:
        """Preparation plus cooking time in minutes."""
        return self.prep_time + self.cook_time
