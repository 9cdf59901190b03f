"""
Till Django Adapter Wiring
==========================
Holds the LedgerRuntime the HTTP views talk to.

Adapter-only glue: the ledger engine itself keeps no module state.
The Django host builds one runtime lazily from settings.TILL_LEDGER
(or accepts one via install_runtime) and shuts it down at exit.
"""

from __future__ import annotations

import atexit
import logging
import threading

from core.config import LedgerSettings
from engines.ledger.runtime import LedgerRuntime

logger = logging.getLogger("till.http")

_RUNTIME_LOCK = threading.Lock()
_RUNTIME: LedgerRuntime | None = None
_ATEXIT_REGISTERED = False


def _shutdown_at_exit() -> None:
    with _RUNTIME_LOCK:
        runtime = _RUNTIME
    if runtime is not None:
        runtime.shutdown()


def _register_atexit() -> None:
    global _ATEXIT_REGISTERED
    if not _ATEXIT_REGISTERED:
        atexit.register(_shutdown_at_exit)
        _ATEXIT_REGISTERED = True


def get_runtime() -> LedgerRuntime:
    global _RUNTIME
    with _RUNTIME_LOCK:
        if _RUNTIME is None:
            runtime = LedgerRuntime.from_settings(
                LedgerSettings.from_django_settings()
            )
            runtime.start()
            _RUNTIME = runtime
            _register_atexit()
            logger.info("HTTP adapter ledger runtime initialised")
        return _RUNTIME


def install_runtime(runtime: LedgerRuntime) -> None:
    """Use an already-started runtime (tests, embedding hosts)."""
    global _RUNTIME
    with _RUNTIME_LOCK:
        previous = _RUNTIME
        _RUNTIME = runtime
        _register_atexit()
    if previous is not None and previous is not runtime:
        previous.shutdown()


def reset_runtime() -> None:
    """Shut down and forget the current runtime."""
    global _RUNTIME
    with _RUNTIME_LOCK:
        runtime = _RUNTIME
        _RUNTIME = None
    if runtime is not None:
        runtime.shutdown()
