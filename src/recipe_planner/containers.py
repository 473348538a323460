"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from recipe_planner.adapters.json_file_blob_store import JsonFileBlobStore
from recipe_planner.adapters.openai_inference_client import OpenAIInferenceClient
from recipe_planner.adapters.supabase_blob_store import SupabaseBlobStore
from recipe_planner.adapters.webpage_client import HttpxPageFetcher
from recipe_planner.config import Settings, resolve_storage_backend
from recipe_planner.services.inference import RecipeInferenceService
from recipe_planner.services.planning import PlanningStore
from recipe_planner.services.recipes import RecipeBook
from recipe_planner.services.requests import RequestGate
from recipe_planner.services.storage import BlobStore
from recipe_planner.services.user_settings import UserSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    blob_store: BlobStore
    recipe_book: RecipeBook
    planning_store: PlanningStore
    user_settings_service: UserSettingsService
    inference_service: RecipeInferenceService
    request_gate: RequestGate
    close_resources: Callable[[], Awaitable[None]]

    def load_stores(self) -> None:
        """Load every store from durable storage."""
        self.recipe_book.load()
        self.planning_store.load()
        self.user_settings_service.load()


def build_blob_store(settings: Settings) -> BlobStore:
    """Create the blob store selected by ``storage_backend``."""
    backend = resolve_storage_backend(settings.storage_backend)
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage requires url and service key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseBlobStore(client, table=settings.supabase_state_table)
    return JsonFileBlobStore(settings.data_dir)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    blob_store = build_blob_store(resolved_settings)
    openai_client = OpenAIInferenceClient.create(resolved_settings.openai_api_key)
    page_fetcher = HttpxPageFetcher.create(
        timeout=resolved_settings.page_fetch_timeout_seconds
    )
    inference_service = RecipeInferenceService(
        client=openai_client,
        page_fetcher=page_fetcher,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await page_fetcher.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        blob_store=blob_store,
        recipe_book=RecipeBook(blob_store),
        planning_store=PlanningStore(blob_store),
        user_settings_service=UserSettingsService(blob_store),
        inference_service=inference_service,
        request_gate=RequestGate(),
        close_resources=close_resources,
    )
