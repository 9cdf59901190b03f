"""
Till KV Store - Public API
============================
Opaque key-value storage backends. Import the Django backend's model
only through DjangoKeyValueStorage so non-Django hosts never load the ORM.
"""

from core.kv_store.backends import (
    DjangoKeyValueStorage,
    FileKeyValueStorage,
    InMemoryKeyValueStorage,
    KeyValueStorage,
)
from core.kv_store.errors import StorageError, StorageReadError, StorageWriteError

__all__ = [
    "KeyValueStorage",
    "InMemoryKeyValueStorage",
    "FileKeyValueStorage",
    "DjangoKeyValueStorage",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
