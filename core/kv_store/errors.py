"""
Till KV Store - Errors
========================
Raised by storage backends. The persistence adapter catches these
(and any other I/O failure) at its best-effort boundary.
"""


class StorageError(Exception):
    """Base error for key-value storage backends."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Storage failure for key '{key}': {message}")


class StorageReadError(StorageError):
    """Value could not be read."""
    pass


class StorageWriteError(StorageError):
    """Value could not be written."""
    pass
