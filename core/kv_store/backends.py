"""
Till KV Store - Storage Backends
==================================
The opaque read/write primitive behind the ledger's persistence
adapter: `get(key) -> str | None` and `set(key, value)`.

Backends:
- InMemoryKeyValueStorage  tests and ephemeral runs
- FileKeyValueStorage      one JSON text file per key, atomic replace
- DjangoKeyValueStorage    KeyValueEntry rows via the Django ORM

Backends raise StorageError subclasses; they never swallow failures.
"""

from __future__ import annotations

import os
import re
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

from core.kv_store.errors import StorageReadError, StorageWriteError

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


# ══════════════════════════════════════════════════════════════
# STORAGE PROTOCOL
# ══════════════════════════════════════════════════════════════

class KeyValueStorage(Protocol):
    """Opaque durable key-value storage."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored text or None if absent."""
        ...  # pragma: no cover

    def set(self, key: str, value: str) -> None:
        """Store text under key, overwriting any prior value."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY
# ══════════════════════════════════════════════════════════════

class InMemoryKeyValueStorage:
    """Dictionary-backed storage for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


# ══════════════════════════════════════════════════════════════
# FILE
# ══════════════════════════════════════════════════════════════

class FileKeyValueStorage:
    """
    Stores each key as `<directory>/<key>.json`.

    Writes go to a temp file that is fsynced and then renamed over the
    target, so a crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: str | os.PathLike) -> None:
        self._directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Storage key '{key}' contains unsafe characters.")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageReadError(key, str(exc)) from exc

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(".json.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, path)
        except OSError as exc:
            raise StorageWriteError(key, str(exc)) from exc


# ══════════════════════════════════════════════════════════════
# DJANGO ORM
# ══════════════════════════════════════════════════════════════

class DjangoKeyValueStorage:
    """Stores values in the till_kv_entries table."""

    def get(self, key: str) -> Optional[str]:
        from django.db import DatabaseError

        from core.kv_store.models import KeyValueEntry

        try:
            entry = KeyValueEntry.objects.filter(key=key).first()
        except DatabaseError as exc:
            raise StorageReadError(key, str(exc)) from exc
        return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        from django.db import DatabaseError, transaction

        from core.kv_store.models import KeyValueEntry

        try:
            with transaction.atomic():
                KeyValueEntry.objects.update_or_create(
                    key=key, defaults={"value": value},
                )
        except DatabaseError as exc:
            raise StorageWriteError(key, str(exc)) from exc
