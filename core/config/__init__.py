"""
Till Core Config - Public API
===============================
Ledger runtime settings. No magic numbers in engine logic.
"""

from core.config.ledger import (
    STORAGE_BACKENDS,
    STORAGE_DJANGO,
    STORAGE_FILE,
    STORAGE_MEMORY,
    LedgerSettings,
)

__all__ = [
    "LedgerSettings",
    "STORAGE_BACKENDS",
    "STORAGE_MEMORY",
    "STORAGE_FILE",
    "STORAGE_DJANGO",
]
