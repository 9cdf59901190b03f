"""
Till Ledger Engine - Runtime
==============================
Explicit lifecycle container for one ledger.

    runtime = LedgerRuntime.from_settings(LedgerSettings())
    runtime.start()      # reconcile, then arm the rollover scheduler
    runtime.service.record_sale("i1", 2)
    runtime.shutdown()   # cancel both rollover timers

Constructed once by the host and passed around by handle. Nothing in
the ledger engine keeps module-level state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from core.config import (
    STORAGE_DJANGO,
    STORAGE_FILE,
    STORAGE_MEMORY,
    LedgerSettings,
)
from core.events import ObserverRegistry
from core.kv_store import (
    DjangoKeyValueStorage,
    FileKeyValueStorage,
    InMemoryKeyValueStorage,
    KeyValueStorage,
)
from core.persistence import SnapshotPersistence
from core.time import Clock, SystemClock
from engines.ledger.reconciliation import ReconciliationResult, reconcile
from engines.ledger.rollover import RolloverScheduler, TimerFactory, thread_timer
from engines.ledger.seed import SeedFactory, default_seed, empty_seed
from engines.ledger.services import LedgerService
from engines.ledger.snapshot import state_to_snapshot
from engines.ledger.store import LedgerState, LedgerStore

logger = logging.getLogger("till.ledger")


def build_storage(settings: LedgerSettings) -> KeyValueStorage:
    if settings.storage_backend == STORAGE_MEMORY:
        return InMemoryKeyValueStorage()
    if settings.storage_backend == STORAGE_FILE:
        return FileKeyValueStorage(Path(settings.state_dir))
    if settings.storage_backend == STORAGE_DJANGO:
        return DjangoKeyValueStorage()
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


class LedgerRuntimeError(Exception):
    """Runtime used outside its start()/shutdown() window."""
    pass


class LedgerRuntime:
    """Owns store, service, persistence and scheduler for one ledger."""

    def __init__(
        self,
        *,
        storage: KeyValueStorage,
        settings: Optional[LedgerSettings] = None,
        clock: Optional[Clock] = None,
        registry: Optional[ObserverRegistry] = None,
        seed: Optional[SeedFactory] = None,
        timer_factory: TimerFactory = thread_timer,
    ) -> None:
        self._settings = settings or LedgerSettings()
        self._clock = clock or SystemClock()
        self._registry = registry or ObserverRegistry()
        if seed is None:
            seed = default_seed if self._settings.seed_on_fresh else empty_seed
        self._seed = seed
        self._timer_factory = timer_factory
        self._persistence = SnapshotPersistence(
            storage, key=self._settings.storage_key, registry=self._registry,
        )

        self._store: Optional[LedgerStore] = None
        self._service: Optional[LedgerService] = None
        self._scheduler: Optional[RolloverScheduler] = None
        self._reconciliation: Optional[ReconciliationResult] = None

    @classmethod
    def from_settings(
        cls,
        settings: LedgerSettings,
        **kwargs,
    ) -> LedgerRuntime:
        return cls(storage=build_storage(settings), settings=settings, **kwargs)

    # ── Lifecycle ──────────────────────────────────────────────

    def start(self) -> ReconciliationResult:
        if self._store is not None:
            raise LedgerRuntimeError("Ledger runtime already started.")

        result = reconcile(
            self._persistence, self._clock,
            seed=self._seed, registry=self._registry,
        )
        self._reconciliation = result
        self._store = LedgerStore(result.state, on_commit=self._persist)
        self._service = LedgerService(
            store=self._store, clock=self._clock, registry=self._registry,
        )
        self._scheduler = RolloverScheduler(
            self._store,
            self._clock,
            skew_ms=self._settings.rollover_skew_ms,
            poll_interval_s=self._settings.poll_interval_s,
            timer_factory=self._timer_factory,
            registry=self._registry,
        )
        self._scheduler.start()
        logger.info(
            f"Ledger runtime started ({result.outcome}) on {result.state.current_date}"
        )
        return result

    def shutdown(self) -> None:
        if self._scheduler is not None:
            self._scheduler.stop()
        logger.info("Ledger runtime shut down")

    def __enter__(self) -> LedgerRuntime:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def _persist(self, state: LedgerState) -> None:
        self._persistence.save(lambda: state_to_snapshot(state))

    # ── Handles ────────────────────────────────────────────────

    def _require(self, component):
        if component is None:
            raise LedgerRuntimeError("Ledger runtime not started.")
        return component

    @property
    def store(self) -> LedgerStore:
        return self._require(self._store)

    @property
    def service(self) -> LedgerService:
        return self._require(self._service)

    @property
    def scheduler(self) -> RolloverScheduler:
        return self._require(self._scheduler)

    @property
    def reconciliation(self) -> ReconciliationResult:
        return self._require(self._reconciliation)

    @property
    def persistence(self) -> SnapshotPersistence:
        return self._persistence

    @property
    def registry(self) -> ObserverRegistry:
        return self._registry

    @property
    def settings(self) -> LedgerSettings:
        return self._settings
