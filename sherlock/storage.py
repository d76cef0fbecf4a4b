"""Local key/value store.

A narrow string-to-string store used for API keys and the persisted
system configuration. Two implementations:

- JsonFileStore: a single JSON object on disk (default, path from settings)
- MemoryStore: process-local dict, used by tests and ephemeral runs

Every read goes back to the backing store so that callers always see the
latest values written by another component.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from sherlock.config import get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal persistent string store."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStore:
    """In-memory store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileStore:
    """Store backed by a JSON object file.

    A missing or unreadable file behaves as an empty store; the file and
    its parent directory are created on first write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning(f"Failed to read local store {self.path}: {e}")
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Local store {self.path} is not valid JSON, ignoring: {e}")
            return {}

        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)


# =============================================================================
# Module-level store
# =============================================================================

_local_store: KeyValueStore | None = None


def get_local_store() -> KeyValueStore:
    """Get the process-wide store, creating the JSON file store on first use."""
    global _local_store
    if _local_store is None:
        _local_store = JsonFileStore(get_settings().STORAGE_PATH)
    return _local_store


def set_local_store(store: KeyValueStore | None) -> None:
    """Replace the process-wide store (``None`` rebuilds it from settings on next use)."""
    global _local_store
    _local_store = store


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "get_local_store",
    "set_local_store",
]
