"""File-based persistence backend: JSON files in a local directory."""

from __future__ import annotations

import logging
from pathlib import Path

log = logging.getLogger(__name__)


class FilePersistenceBackend:
    """Stores each key as ``<base>/<key>.json``."""

    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._base.mkdir(parents=True, exist_ok=True)

    def _key_path(self, key: str) -> Path:
        safe_key = key.replace("/", "_").replace("\\", "_")
        if not safe_key.endswith(".json"):
            safe_key += ".json"
        return self._base / safe_key

    def save(self, key: str, data: str) -> None:
        path = self._key_path(key)
        path.write_text(data, encoding="utf-8")
        log.debug("Saved %s to %s", key, path)

    def load(self, key: str) -> str:
        path = self._key_path(key)
        if not path.is_file():
            raise KeyError(f"Not found: {key} (path: {path})")
        return path.read_text(encoding="utf-8")
