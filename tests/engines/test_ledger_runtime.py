"""
Tests for engines.ledger.runtime - LedgerRuntime lifecycle.
"""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.config import STORAGE_DJANGO, STORAGE_FILE, STORAGE_MEMORY, LedgerSettings
from core.kv_store import (
    DjangoKeyValueStorage,
    FileKeyValueStorage,
    InMemoryKeyValueStorage,
)
from core.time import FixedClock
from engines.ledger.reconciliation import OUTCOME_ARCHIVED, OUTCOME_FRESH, OUTCOME_RESUMED
from engines.ledger.runtime import LedgerRuntime, LedgerRuntimeError, build_storage

LOCAL = timezone(timedelta(hours=3))


class RecordingTimers:
    def __init__(self):
        self.armed = []

    def __call__(self, delay, callback):
        timer = _Timer()
        self.armed.append(timer)
        return timer


class _Timer:
    cancelled = False

    def cancel(self):
        self.cancelled = True


def _runtime(storage, clock, **kwargs):
    timers = RecordingTimers()
    runtime = LedgerRuntime(
        storage=storage,
        settings=LedgerSettings(storage_backend=STORAGE_MEMORY),
        clock=clock,
        timer_factory=timers,
        **kwargs,
    )
    return runtime, timers


class TestBuildStorage:
    def test_backend_selection(self, tmp_path):
        assert isinstance(
            build_storage(LedgerSettings(storage_backend=STORAGE_MEMORY)),
            InMemoryKeyValueStorage,
        )
        assert isinstance(
            build_storage(LedgerSettings(storage_backend=STORAGE_FILE, state_dir=str(tmp_path))),
            FileKeyValueStorage,
        )
        assert isinstance(
            build_storage(LedgerSettings(storage_backend=STORAGE_DJANGO)),
            DjangoKeyValueStorage,
        )


class TestLifecycle:
    def test_handles_require_start(self):
        runtime, _ = _runtime(InMemoryKeyValueStorage(), FixedClock(datetime(2024, 1, 1, tzinfo=LOCAL)))
        with pytest.raises(LedgerRuntimeError):
            runtime.service
        with pytest.raises(LedgerRuntimeError):
            runtime.store

    def test_start_reconciles_and_arms_scheduler(self):
        runtime, timers = _runtime(
            InMemoryKeyValueStorage(), FixedClock(datetime(2024, 1, 1, 9, tzinfo=LOCAL)),
        )
        result = runtime.start()

        assert result.outcome == OUTCOME_FRESH
        assert runtime.store.current_date == "2024-01-01"
        assert runtime.scheduler.running
        assert len(timers.armed) == 2

    def test_double_start_raises(self):
        runtime, _ = _runtime(InMemoryKeyValueStorage(), FixedClock(datetime(2024, 1, 1, tzinfo=LOCAL)))
        runtime.start()
        with pytest.raises(LedgerRuntimeError, match="already started"):
            runtime.start()

    def test_shutdown_cancels_both_timers(self):
        runtime, timers = _runtime(InMemoryKeyValueStorage(), FixedClock(datetime(2024, 1, 1, tzinfo=LOCAL)))
        with runtime:
            pass
        assert not runtime.scheduler.running
        assert all(timer.cancelled for timer in timers.armed)

    def test_seed_on_fresh_disabled(self):
        timers = RecordingTimers()
        runtime = LedgerRuntime(
            storage=InMemoryKeyValueStorage(),
            settings=LedgerSettings(storage_backend=STORAGE_MEMORY, seed_on_fresh=False),
            clock=FixedClock(datetime(2024, 1, 1, tzinfo=LOCAL)),
            timer_factory=timers,
        )
        runtime.start()
        assert runtime.store.items == ()


class TestDurability:
    def test_every_commit_is_persisted(self):
        storage = InMemoryKeyValueStorage()
        runtime, _ = _runtime(storage, FixedClock(datetime(2024, 1, 1, 9, tzinfo=LOCAL)))
        runtime.start()

        runtime.service.record_sale("i1", 2)

        saved = json.loads(storage.get("clothshop_state_v1"))
        assert saved["dailySold"] == 2
        assert saved["dailyIncome"] == 39.98
        assert "sales" not in saved

    def test_restart_same_day_resumes(self):
        storage = InMemoryKeyValueStorage()
        clock = FixedClock(datetime(2024, 1, 1, 9, tzinfo=LOCAL))
        first, _ = _runtime(storage, clock)
        first.start()
        first.service.record_sale("i2", 1)
        first.shutdown()

        clock.advance(3600)
        second, _ = _runtime(storage, clock)
        result = second.start()

        assert result.outcome == OUTCOME_RESUMED
        assert second.store.daily_income == Decimal("59.99")
        assert second.store.sales == ()

    def test_restart_next_day_archives(self):
        storage = InMemoryKeyValueStorage()
        clock = FixedClock(datetime(2024, 1, 1, 9, tzinfo=LOCAL))
        first, _ = _runtime(storage, clock)
        first.start()
        first.service.create_quick_order()
        first.shutdown()

        clock.set(datetime(2024, 1, 2, 8, tzinfo=LOCAL))
        second, _ = _runtime(storage, clock)
        result = second.start()

        assert result.outcome == OUTCOME_ARCHIVED
        assert result.archived.date == "2024-01-01"
        assert result.archived.orders_count == 2

    def test_failed_writes_do_not_stop_operations(self):
        class BrokenStorage(InMemoryKeyValueStorage):
            def set(self, key, value):
                raise OSError("read-only filesystem")

        runtime, _ = _runtime(BrokenStorage(), FixedClock(datetime(2024, 1, 1, 9, tzinfo=LOCAL)))
        runtime.start()

        assert runtime.service.record_sale("i1", 1) is not None
        assert runtime.store.daily_sold == 1
        assert runtime.persistence.save_failures == 2

    def test_non_finite_input_keeps_persistence_healthy(self):
        storage = InMemoryKeyValueStorage()
        runtime, _ = _runtime(storage, FixedClock(datetime(2024, 1, 1, 9, tzinfo=LOCAL)))
        runtime.start()

        item = runtime.service.add_item("Odd", float("inf"), 3)
        runtime.service.adjust_stock(item.id, -1)
        sale = runtime.service.record_sale(item.id, float("inf"))

        assert sale.qty == 2
        assert runtime.persistence.save_failures == 0
        saved = json.loads(storage.get("clothshop_state_v1"))
        assert saved["items"][0] == {"id": item.id, "name": "Odd", "price": 0, "stock": 0, "sold": 2}
