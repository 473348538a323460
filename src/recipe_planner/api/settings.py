"""User preference endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from recipe_planner.api.models import PreferencesOut, PreferencesUpdate

if TYPE_CHECKING:
    from recipe_planner.containers import AppContainer

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("")
async def get_settings(request: Request) -> PreferencesOut:
    container: AppContainer = request.app.state.container
    return PreferencesOut.from_domain(container.user_settings_service.preferences)


@router.put("")
async def update_settings(
    payload: PreferencesUpdate, request: Request
) -> PreferencesOut:
    """Update the system prompt and/or background image."""
    container: AppContainer = request.app.state.container
    service = container.user_settings_service
    if payload.system_prompt is not None:
        service.set_system_prompt(payload.system_prompt)
    if payload.background_image is not None:
        service.set_background_image(payload.background_image)
    return PreferencesOut.from_domain(service.preferences)


@router.post("/reset-prompt")
async def reset_prompt(request: Request) -> PreferencesOut:
    container: AppContainer = request.app.state.container
    return PreferencesOut.from_domain(
        container.user_settings_service.reset_system_prompt()
    )


@router.post("/reset-background")
async def reset_background(request: Request) -> PreferencesOut:
    container: AppContainer = request.app.state.container
    return PreferencesOut.from_domain(
        container.user_settings_service.reset_background_image()
    )
