"""Domain models for meal planning and calendar events."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum


class MealSlot(StrEnum):
    """Named period within a day that can hold recipes."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class MealType(StrEnum):
    """Course role of a dish within a meal slot."""

    STARTER = "Entrée"
    MAIN = "Plat Principal"
    DESSERT = "Dessert"


MEAL_TYPE_ORDER: tuple[MealType, ...] = (
    MealType.STARTER,
    MealType.MAIN,
    MealType.DESSERT,
)

_LEGACY_SLOTS = {
    "petit-dejeuner": MealSlot.BREAKFAST,
    "midi": MealSlot.LUNCH,
    "dejeuner": MealSlot.LUNCH,
    "soir": MealSlot.DINNER,
    "diner": MealSlot.DINNER,
}


def parse_meal_slot(raw: object) -> MealSlot:
    """Parse a meal slot, accepting the older French slot names."""
    if isinstance(raw, MealSlot):
        return raw
    value = str(raw).strip().lower()
    if value in _LEGACY_SLOTS:
        return _LEGACY_SLOTS[value]
    return MealSlot(value)


def to_day_key(value: date | datetime | str) -> str:
    """Normalize a date-like value to its ``YYYY-MM-DD`` calendar-day key."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    cleaned = value.strip()
    try:
        return date.fromisoformat(cleaned).isoformat()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(cleaned).date().isoformat()
    except ValueError as exc:
        raise ValueError(f"Invalid date: {value!r}") from exc


@dataclass(frozen=True)
class PlannedRecipe:
    """A recipe assigned to a meal slot with its course role."""

    recipe_id: str
    meal_type: MealType


@dataclass(frozen=True)
class PlannedMeal:
    """All recipes planned for one (date, slot) pair."""

    date: str
    meal: MealSlot
    recipes: tuple[PlannedRecipe, ...]


@dataclass(frozen=True)
class PlannedEvent:
    """A named occasion spanning one or more calendar days."""

    id: str
    name: str
    start_date: str
    duration: int = 1

    @property
    def end_date(self) -> str:
        """Return the first day after the event (exclusive bound)."""
        start = date.fromisoformat(self.start_date)
        return (start + timedelta(days=self.duration)).isoformat()

    def covers(self, day: str) -> bool:
        """Return True when the given day key falls within the event."""
        return self.start_date <= day < self.end_date
