"""User preferences store: system prompt and background image."""

from dataclasses import dataclass, field

from recipe_planner.errors import StoreNotReadyError
from recipe_planner.services.storage import (
    SETTINGS_STORAGE_KEY,
    BlobStore,
    StoreState,
    read_snapshot,
    write_snapshot,
)


DEFAULT_SYSTEM_PROMPT = """You are an expert chef specializing in creating delicious, easy-to-follow recipes.
Your task is to generate a recipe based on the user's request.
Always provide a concise and appealing title and description.
The ingredients list should be clear and precise.
The steps should be numbered and easy to understand for a novice cook.
The category must be one of the following: 'Entrée', 'Plat Principal', 'Dessert', 'Boisson', 'Apéritif', 'Autre'.
Infer the prep time, cook time, and servings from the user request, or make a reasonable guess if not specified.
Make sure the recipe is complete and logical."""

DEFAULT_BACKGROUND_IMAGE = "/backgrounds/default.jpg"


@dataclass(frozen=True)
class Preferences:
    """Snapshot of the user preferences."""

    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    background_image: str = DEFAULT_BACKGROUND_IMAGE


@dataclass
class UserSettingsService:
    """Preferences store; each change re-persists both fields."""

    storage: BlobStore
    key: str = SETTINGS_STORAGE_KEY
    state: StoreState = field(default=StoreState.LOADING, init=False)
    _preferences: Preferences = field(default_factory=Preferences, init=False)

    def load(self) -> None:
        """Load stored preferences once, falling back to defaults."""
        if self.state is StoreState.READY:
            return
        raw = read_snapshot(self.storage, self.key)
        stored = raw if isinstance(raw, dict) else {}
        self._preferences = Preferences(
            system_prompt=_non_empty(stored.get("systemPrompt"))
            or DEFAULT_SYSTEM_PROMPT,
            background_image=_non_empty(stored.get("backgroundImage"))
            or DEFAULT_BACKGROUND_IMAGE,
        )
        self.state = StoreState.READY

    @property
    def preferences(self) -> Preferences:
        self._require_ready()
        return self._preferences

    @property
    def system_prompt(self) -> str:
        return self.preferences.system_prompt

    @property
    def background_image(self) -> str:
        return self.preferences.background_image

    def set_system_prompt(self, prompt: str) -> Preferences:
        """Store a new system prompt for recipe generation."""
        return self._update(system_prompt=prompt)

    def reset_system_prompt(self) -> Preferences:
        """Restore the default system prompt."""
        return self._update(system_prompt=DEFAULT_SYSTEM_PROMPT)

    def set_background_image(self, url: str) -> Preferences:
        """Store a new background image URL."""
        return self._update(background_image=url)

    def reset_background_image(self) -> Preferences:
        """Restore the default background image."""
        return self._update(background_image=DEFAULT_BACKGROUND_IMAGE)

    def _update(
        self, *, system_prompt: str | None = None, background_image: str | None = None
    ) -> Preferences:
        current = self.preferences
        self._preferences = Preferences(
            system_prompt=current.system_prompt
            if system_prompt is None
            else system_prompt,
            background_image=current.background_image
            if background_image is None
            else background_image,
        )
        write_snapshot(
            self.storage,
            self.key,
            {
                "systemPrompt": self._preferences.system_prompt,
                "backgroundImage": self._preferences.background_image,
            },
        )
        return self._preferences

    def _require_ready(self) -> None:
        if self.state is not StoreState.READY:
            raise StoreNotReadyError("Settings store")


def _non_empty(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None
