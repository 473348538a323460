"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from recipe_planner.api.inference import router as inference_router
from recipe_planner.api.planning import router as planning_router
from recipe_planner.api.recipes import router as recipes_router
from recipe_planner.api.settings import router as settings_router
from recipe_planner.app_logging import configure_logging
from recipe_planner.containers import AppContainer
from recipe_planner.errors import StoreNotReadyError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.load_stores()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(recipes_router)
    app.include_router(planning_router)
    app.include_router(settings_router)
    app.include_router(inference_router)

    @app.exception_handler(StoreNotReadyError)
    async def store_not_ready(
        request: Request, exc: StoreNotReadyError
    ) -> JSONResponse:
        logger.warning("Request before stores were loaded: path=%s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ValueError)
    async def invalid_value(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
