"""File-backed blob store keeping one JSON document per key."""

import json
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from recipe_planner.services.storage import BlobStore

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass
class JsonFileBlobStore(BlobStore):
    """Stores each key as ``<directory>/<key>.json``."""

    directory: Path

    def read(self, key: str) -> object | None:
        """Return the stored document, or None when the key was never written."""
        path = self._path(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def write(self, key: str, payload: object) -> None:
        """Replace the document atomically via a temporary file."""
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"
