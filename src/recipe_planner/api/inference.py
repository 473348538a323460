"""Recipe inference endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import ValidationError

from recipe_planner.api.models import (
    GeneratePlanningRequest,
    GenerateRecipeRequest,
    ImportPhotoRequest,
    ImportUrlRequest,
)
from recipe_planner.domain.inference import GeneratedPlanning
from recipe_planner.domain.recipes import RecipeDraft
from recipe_planner.errors import PlanningGenerationError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from recipe_planner.containers import AppContainer

router = APIRouter(prefix="/inference", tags=["inference"])
_logger = logging.getLogger(__name__)

T = TypeVar("T")


@router.post("/recipe", response_model_exclude_none=True)
async def generate_recipe(
    payload: GenerateRecipeRequest, request: Request
) -> RecipeDraft:
    """Generate a recipe draft from a free-text request."""
    container: AppContainer = request.app.state.container
    system_prompt = container.user_settings_service.system_prompt
    return await _run(
        container,
        payload.request_key,
        lambda: container.inference_service.generate_recipe(
            payload.user_input, system_prompt
        ),
    )


@router.post("/import-url", response_model_exclude_none=True)
async def import_url(payload: ImportUrlRequest, request: Request) -> RecipeDraft:
    """Extract a recipe draft from a web page."""
    container: AppContainer = request.app.state.container
    return await _run(
        container,
        payload.request_key,
        lambda: container.inference_service.import_from_url(payload.url),
    )


@router.post("/import-photo", response_model_exclude_none=True)
async def import_photo(payload: ImportPhotoRequest, request: Request) -> RecipeDraft:
    """Extract a recipe draft from a photo."""
    container: AppContainer = request.app.state.container
    return await _run(
        container,
        payload.request_key,
        lambda: container.inference_service.import_from_photo(payload.photo_data_uri),
    )


@router.post("/planning")
async def generate_planning(
    payload: GeneratePlanningRequest, request: Request
) -> GeneratedPlanning:
    """Generate a multi-day plan from the recipe book."""
    container: AppContainer = request.app.state.container
    recipes = container.recipe_book.list_recipes()
    if payload.recipe_ids is not None:
        wanted = set(payload.recipe_ids)
        recipes = [recipe for recipe in recipes if recipe.id in wanted]
    return await _run(
        container,
        payload.request_key,
        lambda: container.inference_service.generate_planning(
            recipes, payload.duration, payload.constraints
        ),
    )


@router.post("/requests/{request_key}/dismiss")
async def dismiss_request(request_key: str, request: Request) -> dict[str, object]:
    """Cancel the in-flight request started under ``request_key``."""
    container: AppContainer = request.app.state.container
    return {"dismissed": container.request_gate.dismiss(request_key)}


async def _run(
    container: AppContainer,
    request_key: str | None,
    factory: Callable[[], Awaitable[T]],
) -> T:
    """Run an inference call, mapping failures to HTTP errors."""
    try:
        if request_key is None:
            return await factory()
        result = await container.request_gate.run(request_key, factory)
    except (PlanningGenerationError, ValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except Exception as exc:
        _logger.exception("Inference request failed")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Recipe inference service failed",
        ) from exc
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Request superseded"
        )
    return result
