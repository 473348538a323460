"""Shared test fixtures."""

import copy
import json
from dataclasses import dataclass, field

import pytest

from recipe_planner.config import Settings
from recipe_planner.containers import AppContainer
from recipe_planner.domain.recipes import Ingredient, Recipe, RecipeCategory
from recipe_planner.services.inference import (
    InferenceClient,
    PageFetcher,
    RecipeInferenceService,
)
from recipe_planner.services.planning import PlanningStore
from recipe_planner.services.recipes import RecipeBook
from recipe_planner.services.requests import RequestGate
from recipe_planner.services.storage import BlobStore
from recipe_planner.services.user_settings import UserSettingsService


@dataclass
class InMemoryBlobStore(BlobStore):
    """In-memory blob store that round-trips payloads through JSON."""

    documents: dict[str, str] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)

    def read(self, key: str) -> object | None:
        raw = self.documents.get(key)
        return None if raw is None else json.loads(raw)

    def write(self, key: str, payload: object) -> None:
        self.documents[key] = json.dumps(payload, ensure_ascii=False)
        self.writes.append(key)

    def seed(self, key: str, payload: object) -> None:
        self.documents[key] = json.dumps(payload, ensure_ascii=False)


@dataclass
class FailingBlobStore(BlobStore):
    """Blob store whose reads and writes always raise."""

    def read(self, key: str) -> object | None:
        raise OSError("storage unavailable")

    def write(self, key: str, payload: object) -> None:
        raise OSError("storage unavailable")


@dataclass
class FakeInferenceClient(InferenceClient):
    """Fake inference client returning queued payloads and recording calls."""

    payloads: list[dict[str, object] | None] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object] | None:
        self.calls.append(
            {
                "model": model,
                "instructions": instructions,
                "prompt": prompt,
                "schema_name": schema_name,
                "image_data_url": image_data_url,
            }
        )
        if self.error is not None:
            raise self.error
        if not self.payloads:
            return None
        return copy.deepcopy(self.payloads.pop(0))


@dataclass
class FakePageFetcher(PageFetcher):
    """Fake page fetcher returning static text."""

    text: str = "Tarte aux pommes\n4 pommes\n200 g de farine"
    urls: list[str] = field(default_factory=list)

    async def fetch_text(self, url: str) -> str:
        self.urls.append(url)
        return self.text


def make_recipe(  # noqa: PLR0913
    recipe_id: str = "R1",
    title: str = "Poulet rôti",
    category: RecipeCategory = RecipeCategory.MAIN,
    prep_time: int = 10,
    cook_time: int = 20,
    servings: int = 4,
    ingredients: list[str] | None = None,
) -> Recipe:
    """Build a recipe with sensible defaults for tests."""
    names = ingredients if ingredients is not None else ["Poulet", "Thym", "Beurre"]
    return Recipe(
        id=recipe_id,
        title=title,
        description=f"{title} maison",
        category=category,
        prep_time=prep_time,
        cook_time=cook_time,
        servings=servings,
        ingredients=[Ingredient(name=name, quantity="1") for name in names],
        steps=["Préparer", "Cuire"],
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        storage_backend="file",
        data_dir=tmp_path / "data",
    )


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def planning_store(blob_store: InMemoryBlobStore) -> PlanningStore:
    store = PlanningStore(blob_store)
    store.load()
    return store


@pytest.fixture
def recipe_book(blob_store: InMemoryBlobStore) -> RecipeBook:
    book = RecipeBook(blob_store)
    book.load()
    return book


@pytest.fixture
def inference_client() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture
def page_fetcher() -> FakePageFetcher:
    return FakePageFetcher()


@pytest.fixture
def inference_service(
    inference_client: FakeInferenceClient, page_fetcher: FakePageFetcher
) -> RecipeInferenceService:
    return RecipeInferenceService(
        client=inference_client,
        page_fetcher=page_fetcher,
        model="gpt-5.2",
        reasoning_effort="low",
        store=False,
    )


@pytest.fixture
def container(
    settings: Settings,
    blob_store: InMemoryBlobStore,
    inference_service: RecipeInferenceService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        blob_store=blob_store,
        recipe_book=RecipeBook(blob_store),
        planning_store=PlanningStore(blob_store),
        user_settings_service=UserSettingsService(blob_store),
        inference_service=inference_service,
        request_gate=RequestGate(),
        close_resources=close_resources,
    )
