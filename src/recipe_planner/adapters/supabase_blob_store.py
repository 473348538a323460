"""Supabase-backed blob store for application snapshots."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from recipe_planner.services.storage import BlobStore


@dataclass
class SupabaseBlobStore(BlobStore):
    """Keeps one row per key with the snapshot in a JSON column."""

    client: Client
    table: str = "app_state"

    def read(self, key: str) -> object | None:
        """Return the stored snapshot for a key."""
        response = (
            self.client.table(self.table)
            .select("payload")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("payload")

    def write(self, key: str, payload: object) -> None:
        """Insert or replace the snapshot for a key."""
        self.client.table(self.table).upsert(
            {
                "key": key,
                "payload": payload,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()
