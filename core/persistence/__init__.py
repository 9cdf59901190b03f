"""
Till Core Persistence - Public API
====================================
Durability is best-effort; the ledger keeps running without it.
"""

from core.persistence.adapter import (
    PERSISTENCE_LOAD_FAILED,
    PERSISTENCE_SAVE_FAILED,
    SnapshotPersistence,
)

__all__ = [
    "SnapshotPersistence",
    "PERSISTENCE_SAVE_FAILED",
    "PERSISTENCE_LOAD_FAILED",
]
