"""Key-value storage backends for clinic collections.

Every collection is persisted as one JSON document under a single key. Reads
are forgiving: a missing or corrupt value yields the caller's fallback so a
damaged file never takes the whole tool down. Writes are strict and raise
:class:`~medicita.errors.StorageError`.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from .config import DEFAULT_KEY_PREFIX
from .errors import StorageError

__all__ = ["KeyValueStore", "MemoryStore", "JSONFileStore"]

logger = logging.getLogger(__name__)

USERS_KEY = "users"
SESSION_KEY = "session"
PATIENTS_KEY = "patients"
DOCTORS_KEY = "doctors"
APPOINTMENTS_KEY = "citas"
HISTORY_KEY = "historial"


class KeyValueStore(Protocol):
    """Minimal interface required from a persistent store."""

    def get(self, key: str, fallback: Any = None) -> Any:
        """Return the decoded value for *key*, or *fallback*."""

    def set(self, key: str, value: Any) -> None:
        """Serialize and persist *value* under *key*."""

    def delete(self, key: str) -> None:
        """Remove *key* if present."""

    def lock(self, key: str) -> threading.Lock:
        """Return the lock guarding read-modify-write cycles on *key*."""


class _KeyLocks:
    """One lock per logical key, created on first use."""

    def __init__(self) -> None:
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def lock(self, key: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())


def _encode(key: str, value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Value for '{key}' is not JSON serializable") from exc


class MemoryStore(_KeyLocks):
    """In-memory store holding the serialized text, like browser storage."""

    def __init__(self, prefix: str = DEFAULT_KEY_PREFIX) -> None:
        super().__init__()
        self._prefix = prefix
        self._data: Dict[str, str] = {}

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str, fallback: Any = None) -> Any:
        raw = self._data.get(self._full_key(key))
        if raw is None:
            return fallback
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt value stored under %s", key)
            return fallback
        return fallback if value is None else value

    def set(self, key: str, value: Any) -> None:
        self._data[self._full_key(key)] = _encode(key, value)

    def delete(self, key: str) -> None:
        self._data.pop(self._full_key(key), None)

    def raw(self, key: str) -> Optional[str]:
        """Return the stored text for *key* without decoding it."""

        return self._data.get(self._full_key(key))

    def put_raw(self, key: str, text: str) -> None:
        """Store *text* verbatim under *key*."""

        self._data[self._full_key(key)] = text


class JSONFileStore(_KeyLocks):
    """Store each key as ``<prefix><key>.json`` inside a directory."""

    def __init__(self, directory: Path, prefix: str = DEFAULT_KEY_PREFIX) -> None:
        super().__init__()
        self._directory = Path(directory)
        self._prefix = prefix

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{self._prefix}{key}.json"

    def get(self, key: str, fallback: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return fallback
        try:
            raw_content = path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return fallback
        if not raw_content:
            return fallback
        try:
            value = json.loads(raw_content)
        except json.JSONDecodeError as exc:
            logger.warning("Discarding corrupt JSON in %s: %s", path, exc.msg)
            return fallback
        return fallback if value is None else value

    def set(self, key: str, value: Any) -> None:
        serialized = _encode(key, value)
        path = self._path(key)
        tmp_name: Optional[str] = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(f"{serialized}\n")
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Failed to persist %s: %s", path, exc)
            raise StorageError(f"Failed to persist '{key}'") from exc

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageError(f"Failed to delete '{key}'") from exc
