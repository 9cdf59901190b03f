"""
Till Core Config - Ledger Settings
====================================
Runtime knobs for the ledger, read from the Django settings module
when one is configured and from plain defaults otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

STORAGE_MEMORY = "memory"
STORAGE_FILE = "file"
STORAGE_DJANGO = "django"

STORAGE_BACKENDS = frozenset({STORAGE_MEMORY, STORAGE_FILE, STORAGE_DJANGO})


@dataclass(frozen=True)
class LedgerSettings:
    """
    Ledger configuration.

    storage_key:        key the snapshot is stored under
    storage_backend:    memory | file | django
    state_dir:          directory for the file backend
    rollover_skew_ms:   delay past midnight for the deadline timer
    poll_interval_s:    safety-poll period
    seed_on_fresh:      seed demo catalog when no snapshot exists
    """

    storage_key: str = "clothshop_state_v1"
    storage_backend: str = STORAGE_FILE
    state_dir: str = ".till"
    rollover_skew_ms: int = 1000
    poll_interval_s: float = 60.0
    seed_on_fresh: bool = True

    def __post_init__(self) -> None:
        if not self.storage_key:
            raise ValueError("storage_key must be non-empty.")
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage_backend must be one of {sorted(STORAGE_BACKENDS)}, "
                f"got '{self.storage_backend}'."
            )
        if self.rollover_skew_ms < 0:
            raise ValueError("rollover_skew_ms cannot be negative.")
        if self.poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be positive.")

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> LedgerSettings:
        defaults = cls()
        return cls(
            storage_key=str(values.get("STORAGE_KEY", defaults.storage_key)),
            storage_backend=str(
                values.get("STORAGE_BACKEND", defaults.storage_backend)
            ),
            state_dir=str(values.get("STATE_DIR", defaults.state_dir)),
            rollover_skew_ms=int(
                values.get("ROLLOVER_SKEW_MS", defaults.rollover_skew_ms)
            ),
            poll_interval_s=float(
                values.get("POLL_INTERVAL_SECONDS", defaults.poll_interval_s)
            ),
            seed_on_fresh=bool(values.get("SEED_ON_FRESH", defaults.seed_on_fresh)),
        )

    @classmethod
    def from_django_settings(cls) -> LedgerSettings:
        """Build from settings.TILL_LEDGER (empty dict if unset)."""
        from django.conf import settings

        return cls.from_mapping(getattr(settings, "TILL_LEDGER", {}) or {})
