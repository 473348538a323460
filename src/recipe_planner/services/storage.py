"""Snapshot persistence shared by the application stores."""

import logging
from enum import StrEnum
from typing import Protocol

_logger = logging.getLogger(__name__)

PLANNING_STORAGE_KEY = "mon_planning_v2"
RECIPES_STORAGE_KEY = "recipes_v1"
SETTINGS_STORAGE_KEY = "app_settings_v1"


class BlobStore(Protocol):
    """Durable key-value store holding one JSON document per key."""

    def read(self, key: str) -> object | None:
        """Return the stored document for a key, if present."""

    def write(self, key: str, payload: object) -> None:
        """Replace the stored document for a key."""


class StoreState(StrEnum):
    """Lifecycle of a snapshot-backed store."""

    LOADING = "loading"
    READY = "ready"


def read_snapshot(storage: BlobStore, key: str) -> object | None:
    """Read a snapshot, treating any storage failure as missing data."""
    try:
        return storage.read(key)
    except Exception:
        _logger.exception("Failed to load snapshot: key=%s", key)
        return None


def write_snapshot(storage: BlobStore, key: str, payload: object) -> bool:
    """Write a full snapshot; failures are logged and reported as False."""
    try:
        storage.write(key, payload)
    except Exception:
        _logger.exception("Failed to save snapshot: key=%s", key)
        return False
    return True
