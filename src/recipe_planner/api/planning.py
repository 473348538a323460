"""Meal planning and event endpoints."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from recipe_planner.api.models import (
    ApplyPlanningRequest,
    DayPlanOut,
    EventCreateRequest,
    EventPlanOut,
    EventUpdateRequest,
    PlanEntryRequest,
    PlannedEventOut,
    PlannedMealOut,
    ShoppingItemOut,
    WeekPlanOut,
)
from recipe_planner.services.planning import apply_generated_planning
from recipe_planner.services.queries import (
    count_planned_slots,
    plan_for_date,
    recipes_for_plan,
    resolve_plan,
    shopping_list,
    week_days,
)

if TYPE_CHECKING:
    from recipe_planner.containers import AppContainer
    from recipe_planner.domain.planning import PlannedMeal

router = APIRouter(prefix="/planning", tags=["planning"])


@router.get("/days/{day}")
async def day_plan(day: dt.date, request: Request) -> DayPlanOut:
    """Return the meals and events planned on a day."""
    container: AppContainer = request.app.state.container
    return _day_plan(container, day, container.planning_store.get_plan_for_date(day))


@router.get("/weeks/{day}")
async def week_plan(day: dt.date, request: Request) -> WeekPlanOut:
    """Return the Monday-starting week containing ``day``."""
    container: AppContainer = request.app.state.container
    days = week_days(day)
    meals = container.planning_store.get_plan_for_range(days[0], days[-1])
    return WeekPlanOut(
        days=[
            _day_plan(container, current, plan_for_date(meals, current))
            for current in days
        ],
        planned_slots=count_planned_slots(meals, days),
    )


@router.get("/weeks/{day}/shopping-list")
async def week_shopping_list(day: dt.date, request: Request) -> list[ShoppingItemOut]:
    """Merge the ingredients of every recipe planned during the week."""
    container: AppContainer = request.app.state.container
    days = week_days(day)
    meals = container.planning_store.get_plan_for_range(days[0], days[-1])
    recipes = {recipe.id: recipe for recipe in container.recipe_book.list_recipes()}
    return [
        ShoppingItemOut.from_domain(item)
        for item in shopping_list(recipes_for_plan(meals, recipes))
    ]


@router.post("/meals")
async def add_meal(entry: PlanEntryRequest, request: Request) -> DayPlanOut:
    """Assign a recipe to a meal slot."""
    container: AppContainer = request.app.state.container
    store = container.planning_store
    store.add_recipe_to_plan(entry.date, entry.meal, entry.recipe_id, entry.meal_type)
    return _day_plan(container, entry.date, store.get_plan_for_date(entry.date))


@router.delete("/meals")
async def remove_meal(entry: PlanEntryRequest, request: Request) -> DayPlanOut:
    """Remove a recipe from a meal slot."""
    container: AppContainer = request.app.state.container
    store = container.planning_store
    store.remove_recipe_from_plan(
        entry.date, entry.meal, entry.recipe_id, entry.meal_type
    )
    return _day_plan(container, entry.date, store.get_plan_for_date(entry.date))


@router.get("/events")
async def list_events(
    request: Request, day: dt.date | None = None
) -> list[PlannedEventOut]:
    """Return all events, or those covering ``day``."""
    container: AppContainer = request.app.state.container
    store = container.planning_store
    events = store.planned_events if day is None else store.get_events_for_date(day)
    return [PlannedEventOut.from_domain(event) for event in events]


@router.post("/events", status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreateRequest, request: Request
) -> PlannedEventOut:
    """Create an event spanning one or more days."""
    container: AppContainer = request.app.state.container
    event = container.planning_store.add_event(
        payload.name, payload.start_date, duration=payload.duration
    )
    return PlannedEventOut.from_domain(event)


@router.get("/events/{event_id}")
async def event_plan(event_id: str, request: Request) -> EventPlanOut:
    """Return an event with the meals planned during it."""
    container: AppContainer = request.app.state.container
    store = container.planning_store
    event = store.get_event(event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    recipes = {recipe.id: recipe for recipe in container.recipe_book.list_recipes()}
    return EventPlanOut(
        event=PlannedEventOut.from_domain(event),
        meals=[
            PlannedMealOut.from_domain(meal, resolve_plan(meal, recipes))
            for meal in store.get_plan_for_event(event_id)
        ],
    )


@router.patch("/events/{event_id}")
async def update_event(
    event_id: str, payload: EventUpdateRequest, request: Request
) -> PlannedEventOut:
    """Update the fields sent in the body."""
    container: AppContainer = request.app.state.container
    event = container.planning_store.update_event(
        event_id,
        name=payload.name,
        start_date=payload.start_date,
        duration=payload.duration,
    )
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return PlannedEventOut.from_domain(event)


@router.delete("/events/{event_id}")
async def delete_event(event_id: str, request: Request) -> dict[str, str]:
    """Delete an event."""
    container: AppContainer = request.app.state.container
    container.planning_store.remove_event(event_id)
    return {"status": "ok"}


@router.post("/generated", status_code=status.HTTP_201_CREATED)
async def apply_generated(
    payload: ApplyPlanningRequest, request: Request
) -> EventPlanOut:
    """Store a generated plan as an event with its meals."""
    container: AppContainer = request.app.state.container
    try:
        event = apply_generated_planning(
            payload.planning,
            payload.start_date,
            container.recipe_book,
            container.planning_store,
            duration=payload.duration,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    recipes = {recipe.id: recipe for recipe in container.recipe_book.list_recipes()}
    return EventPlanOut(
        event=PlannedEventOut.from_domain(event),
        meals=[
            PlannedMealOut.from_domain(meal, resolve_plan(meal, recipes))
            for meal in container.planning_store.get_plan_for_event(event.id)
        ],
    )


def _day_plan(
    container: AppContainer, day: dt.date, meals: list[PlannedMeal]
) -> DayPlanOut:
    recipes = {recipe.id: recipe for recipe in container.recipe_book.list_recipes()}
    return DayPlanOut(
        date=day.isoformat(),
        meals=[
            PlannedMealOut.from_domain(meal, resolve_plan(meal, recipes))
            for meal in meals
        ],
        events=[
            PlannedEventOut.from_domain(event)
            for event in container.planning_store.get_events_for_date(day)
        ],
    )
