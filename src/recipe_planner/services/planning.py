"""Planning store for meal assignments and calendar events."""

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta

from recipe_planner.domain.inference import GeneratedPlanning
from recipe_planner.domain.planning import (
    MealSlot,
    MealType,
    PlannedEvent,
    PlannedMeal,
    PlannedRecipe,
    parse_meal_slot,
    to_day_key,
)
from recipe_planner.errors import StoreNotReadyError
from recipe_planner.services.recipes import RecipeBook
from recipe_planner.services.storage import (
    PLANNING_STORAGE_KEY,
    BlobStore,
    StoreState,
    read_snapshot,
    write_snapshot,
)

_logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 2

DateLike = date | datetime | str


@dataclass
class PlanningStore:
    """In-memory meal plan and events, persisted as one snapshot per change."""

    storage: BlobStore
    key: str = PLANNING_STORAGE_KEY
    state: StoreState = field(default=StoreState.LOADING, init=False)
    _meals: list[PlannedMeal] = field(default_factory=list, init=False, repr=False)
    _events: list[PlannedEvent] = field(default_factory=list, init=False, repr=False)
    _last_event_ms: int = field(default=0, init=False, repr=False)

    def load(self) -> None:
        """Load the durable snapshot once and mark the store ready."""
        if self.state is StoreState.READY:
            return
        raw = read_snapshot(self.storage, self.key)
        self._meals, self._events = _parse_snapshot(raw)
        self.state = StoreState.READY
        _logger.info(
            "Planning loaded: meals=%s events=%s", len(self._meals), len(self._events)
        )

    @property
    def planned_meals(self) -> list[PlannedMeal]:
        self._require_ready()
        return list(self._meals)

    @property
    def planned_events(self) -> list[PlannedEvent]:
        self._require_ready()
        return list(self._events)

    def add_recipe_to_plan(
        self,
        day: DateLike,
        slot: MealSlot | str,
        recipe_id: str,
        meal_type: MealType | str,
    ) -> None:
        """Assign a recipe to a slot; repeating the same assignment is a no-op."""
        self._require_ready()
        day_key = to_day_key(day)
        meal_slot = parse_meal_slot(slot)
        entry = PlannedRecipe(recipe_id=recipe_id, meal_type=MealType(meal_type))
        for index, plan in enumerate(self._meals):
            if plan.date == day_key and plan.meal is meal_slot:
                if entry in plan.recipes:
                    return
                self._meals[index] = replace(plan, recipes=(*plan.recipes, entry))
                break
        else:
            self._meals.append(
                PlannedMeal(date=day_key, meal=meal_slot, recipes=(entry,))
            )
        self._persist()

    def remove_recipe_from_plan(
        self,
        day: DateLike,
        slot: MealSlot | str,
        recipe_id: str,
        meal_type: MealType | str,
    ) -> None:
        """Remove an assignment and drop the slot record once it is empty."""
        self._require_ready()
        day_key = to_day_key(day)
        meal_slot = parse_meal_slot(slot)
        entry = PlannedRecipe(recipe_id=recipe_id, meal_type=MealType(meal_type))
        changed = False
        meals: list[PlannedMeal] = []
        for plan in self._meals:
            matches = plan.date == day_key and plan.meal is meal_slot
            if matches and entry in plan.recipes:
                changed = True
                remaining = tuple(item for item in plan.recipes if item != entry)
                if not remaining:
                    continue
                plan = replace(plan, recipes=remaining)
            meals.append(plan)
        if not changed:
            return
        self._meals = meals
        self._persist()

    def get_plan_for_date(self, day: DateLike) -> list[PlannedMeal]:
        """Return the slot records planned for a day."""
        self._require_ready()
        day_key = to_day_key(day)
        return [plan for plan in self._meals if plan.date == day_key]

    def get_plan_for_range(self, start: DateLike, end: DateLike) -> list[PlannedMeal]:
        """Return slot records between two days, both inclusive."""
        self._require_ready()
        start_key, end_key = to_day_key(start), to_day_key(end)
        return sorted(
            (plan for plan in self._meals if start_key <= plan.date <= end_key),
            key=lambda plan: plan.date,
        )

    def add_event_to_plan(self, day: DateLike, name: str) -> PlannedEvent:
        """Annotate a single day with a named event."""
        return self.add_event(name, day, duration=1)

    def add_event(
        self, name: str, start_date: DateLike, duration: int = 1
    ) -> PlannedEvent:
        """Create an event starting on ``start_date`` lasting ``duration`` days."""
        self._require_ready()
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Event name must not be empty")
        if duration < 1:
            raise ValueError("Event duration must be at least one day")
        event = PlannedEvent(
            id=self._next_event_id(),
            name=cleaned,
            start_date=to_day_key(start_date),
            duration=duration,
        )
        self._events.append(event)
        self._persist()
        return event

    def get_event(self, event_id: str) -> PlannedEvent | None:
        """Return an event by id, if present."""
        self._require_ready()
        return next((event for event in self._events if event.id == event_id), None)

    def update_event(
        self,
        event_id: str,
        *,
        name: str | None = None,
        start_date: DateLike | None = None,
        duration: int | None = None,
    ) -> PlannedEvent | None:
        """Replace the given fields of an event; unknown ids are ignored."""
        self._require_ready()
        changes: dict[str, object] = {}
        if name is not None:
            if not name.strip():
                raise ValueError("Event name must not be empty")
            changes["name"] = name.strip()
        if start_date is not None:
            changes["start_date"] = to_day_key(start_date)
        if duration is not None:
            if duration < 1:
                raise ValueError("Event duration must be at least one day")
            changes["duration"] = duration
        for index, event in enumerate(self._events):
            if event.id == event_id:
                updated = replace(event, **changes)
                self._events[index] = updated
                self._persist()
                return updated
        _logger.warning("Event update ignored, unknown id: event_id=%s", event_id)
        return None

    def remove_event(self, event_id: str) -> None:
        """Delete an event by id; unknown ids are ignored."""
        self._require_ready()
        events = [event for event in self._events if event.id != event_id]
        if len(events) == len(self._events):
            return
        self._events = events
        self._persist()

    def remove_event_from_plan(self, event_id: str) -> None:
        """Delete a day annotation by id."""
        self.remove_event(event_id)

    def get_events_for_date(self, day: DateLike) -> list[PlannedEvent]:
        """Return events whose span contains the given day."""
        self._require_ready()
        day_key = to_day_key(day)
        return [event for event in self._events if event.covers(day_key)]

    def get_plan_for_event(self, event_id: str) -> list[PlannedMeal]:
        """Return the slot records planned during an event's span."""
        event = self.get_event(event_id)
        if event is None:
            return []
        return sorted(
            (plan for plan in self._meals if event.covers(plan.date)),
            key=lambda plan: plan.date,
        )

    def snapshot(self) -> dict[str, object]:
        """Serialize the full planning state."""
        return {
            "version": SNAPSHOT_VERSION,
            "meals": [_meal_to_dict(plan) for plan in self._meals],
            "events": [_event_to_dict(event) for event in self._events],
        }

    def _persist(self) -> None:
        write_snapshot(self.storage, self.key, self.snapshot())

    def _require_ready(self) -> None:
        if self.state is not StoreState.READY:
            raise StoreNotReadyError("Planning store")

    def _next_event_id(self) -> str:
        now_ms = time.time_ns() // 1_000_000
        self._last_event_ms = max(now_ms, self._last_event_ms + 1)
        return f"event-{self._last_event_ms}"


def apply_generated_planning(
    planning: GeneratedPlanning,
    start_date: DateLike,
    recipe_book: RecipeBook,
    planning_store: PlanningStore,
    duration: int | None = None,
) -> PlannedEvent:
    """Materialize a generated plan as an event plus slot assignments.

    The event lasts ``duration`` days when given, stretched if needed to cover
    the last planned day; otherwise it ends on the last planned day.
    """
    start = date.fromisoformat(to_day_key(start_date))
    if any(
        meal.new_recipe is not None and not (meal.new_recipe.title or "").strip()
        for meal in planning.meals
    ):
        raise ValueError("Generated recipes must have a title")
    span = planning.duration if duration is None else max(duration, planning.duration)
    event = planning_store.add_event(planning.event_name, start, duration=span)
    for meal in planning.meals:
        if meal.new_recipe is not None:
            recipe_id = recipe_book.create_recipe(meal.new_recipe).id
        elif meal.recipe_id and recipe_book.get_recipe(meal.recipe_id) is not None:
            recipe_id = meal.recipe_id
        else:
            _logger.warning(
                "Generated meal skipped, unknown recipe: day=%s recipe_id=%s",
                meal.day,
                meal.recipe_id,
            )
            continue
        planning_store.add_recipe_to_plan(
            start + timedelta(days=meal.day - 1), meal.meal, recipe_id, meal.meal_type
        )
    return event


def _parse_snapshot(raw: object) -> tuple[list[PlannedMeal], list[PlannedEvent]]:
    """Parse a stored snapshot, upgrading the untagged single-day event shape."""
    if not isinstance(raw, dict):
        if raw is not None:
            _logger.warning("Ignoring malformed planning snapshot")
        return [], []
    meals: list[PlannedMeal] = []
    for row in raw.get("meals") or []:
        meal = _parse_meal(row)
        if meal is not None:
            meals.append(meal)
    events: list[PlannedEvent] = []
    for row in raw.get("events") or []:
        event = _parse_event(row)
        if event is not None:
            events.append(event)
    return _merge_duplicate_slots(meals), events


def _parse_meal(row: object) -> PlannedMeal | None:
    try:
        recipes = tuple(
            dict.fromkeys(
                PlannedRecipe(
                    recipe_id=str(item["recipeId"]),
                    meal_type=MealType(item["mealType"]),
                )
                for item in row["recipes"]
            )
        )
        meal = PlannedMeal(
            date=to_day_key(str(row["date"])),
            meal=parse_meal_slot(row["meal"]),
            recipes=recipes,
        )
    except (KeyError, TypeError, ValueError):
        _logger.warning("Skipping malformed planned meal: %r", row)
        return None
    return meal if meal.recipes else None


def _parse_event(row: object) -> PlannedEvent | None:
    try:
        start = row.get("startDate") or row["date"]
        return PlannedEvent(
            id=str(row["id"]),
            name=str(row["name"]),
            start_date=to_day_key(str(start)),
            duration=max(int(row.get("duration") or 1), 1),
        )
    except (AttributeError, KeyError, TypeError, ValueError):
        _logger.warning("Skipping malformed planned event: %r", row)
        return None


def _merge_duplicate_slots(meals: list[PlannedMeal]) -> list[PlannedMeal]:
    merged: dict[tuple[str, MealSlot], PlannedMeal] = {}
    for meal in meals:
        key = (meal.date, meal.meal)
        existing = merged.get(key)
        if existing is None:
            merged[key] = meal
            continue
        recipes = tuple(dict.fromkeys((*existing.recipes, *meal.recipes)))
        merged[key] = replace(existing, recipes=recipes)
    return list(merged.values())


def _meal_to_dict(plan: PlannedMeal) -> dict[str, object]:
    return {
        "date": plan.date,
        "meal": plan.meal.value,
        "recipes": [
            {"recipeId": item.recipe_id, "mealType": item.meal_type.value}
            for item in plan.recipes
        ],
    }


def _event_to_dict(event: PlannedEvent) -> dict[str, object]:
    return {
        "id": event.id,
        "name": event.name,
        "startDate": event.start_date,
        "duration": event.duration,
    }
