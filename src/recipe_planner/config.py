"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    storage_backend: str = "file"
    data_dir: Path = Path(".data")
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_state_table: str = "app_state"
    page_fetch_timeout_seconds: float = 20.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_storage_backend(raw: str) -> str:
    """Normalize the configured storage backend name."""
    cleaned = raw.strip().lower()
    if cleaned in {"", "file", "local"}:
        return "file"
    if cleaned == "supabase":
        return "supabase"
    raise ValueError(f"Unknown storage backend: {raw!r}")
