"""
Till Core Persistence - Snapshot Persistence Adapter
======================================================
Best-effort JSON snapshot save/load over an opaque KeyValueStorage.

Rules:
- save() overwrites the previous snapshot under one key
- save() NEVER raises; failure is logged and reported to observers
- load() NEVER raises; absent, unreadable or unparseable -> None
- In-memory state is never rolled back because a write failed

This module does NOT interpret snapshot contents beyond "is a JSON object".
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional, Union

from core.events import ObserverRegistry, notify
from core.kv_store.backends import KeyValueStorage

logger = logging.getLogger("till.persistence")

PERSISTENCE_SAVE_FAILED = "ledger.persistence.save_failed"
PERSISTENCE_LOAD_FAILED = "ledger.persistence.load_failed"

SnapshotSource = Union[Dict[str, Any], Callable[[], Dict[str, Any]]]


class SnapshotPersistence:
    """Serializes ledger snapshots to a key-value store."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str,
        registry: Optional[ObserverRegistry] = None,
    ) -> None:
        if not key:
            raise ValueError("Snapshot key must be non-empty.")
        self._storage = storage
        self._key = key
        self._registry = registry
        self._save_failures = 0

    @property
    def key(self) -> str:
        return self._key

    @property
    def save_failures(self) -> int:
        """Number of dropped writes since construction."""
        return self._save_failures

    def save(self, snapshot: SnapshotSource) -> bool:
        """
        Write the full snapshot. Returns True if it reached storage.

        `snapshot` may be the dict itself or a zero-argument callable that
        builds it; a builder that raises counts as a failed save.
        Fire-and-forget for callers: the return value is informational.
        """
        try:
            if callable(snapshot):
                snapshot = snapshot()
            encoded = json.dumps(snapshot, sort_keys=True, allow_nan=False)
            self._storage.set(self._key, encoded)
        except Exception as exc:
            self._save_failures += 1
            logger.warning(
                f"Failed to persist snapshot '{self._key}': "
                f"{type(exc).__name__}: {exc}"
            )
            notify(
                PERSISTENCE_SAVE_FAILED,
                {
                    "key": self._key,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                self._registry,
            )
            return False

        logger.debug(f"Snapshot '{self._key}' persisted ({len(encoded)} bytes)")
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the last saved snapshot, or None if absent or corrupt."""
        try:
            raw = self._storage.get(self._key)
        except Exception as exc:
            self.report_corrupt(f"{type(exc).__name__}: {exc}")
            return None

        if raw is None or raw == "":
            logger.info(f"No persisted snapshot under '{self._key}'")
            return None

        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            self.report_corrupt(f"unparseable JSON: {exc}")
            return None

        if not isinstance(parsed, dict):
            self.report_corrupt(
                f"expected JSON object, got {type(parsed).__name__}"
            )
            return None
        return parsed

    def report_corrupt(self, reason: str) -> None:
        """Log and publish a load failure (also used by snapshot decoders)."""
        logger.warning(
            f"Ignoring persisted snapshot '{self._key}': {reason}"
        )
        notify(
            PERSISTENCE_LOAD_FAILED,
            {"key": self._key, "reason": reason},
            self._registry,
        )
