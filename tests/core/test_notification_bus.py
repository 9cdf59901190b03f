"""
Tests for core.events - observer registry and never-raising dispatch.
"""

import pytest

from core.events import (
    DuplicateObserverError,
    InvalidNotificationType,
    Notification,
    NotificationBusError,
    ObserverRegistry,
    notify,
)


class TestObserverRegistry:
    def test_subscribe_and_get(self):
        registry = ObserverRegistry()
        handler = lambda n: None
        registry.subscribe("ledger.day.archived", handler)
        assert registry.get_observers("ledger.day.archived") == [handler]
        assert registry.has_observers("ledger.day.archived")

    def test_rejects_bad_format(self):
        registry = ObserverRegistry()
        with pytest.raises(InvalidNotificationType):
            registry.subscribe("ledger.archived", lambda n: None)
        with pytest.raises(InvalidNotificationType):
            registry.subscribe("", lambda n: None)

    def test_rejects_duplicate_handler(self):
        registry = ObserverRegistry()
        handler = lambda n: None
        registry.subscribe("ledger.day.archived", handler)
        with pytest.raises(DuplicateObserverError):
            registry.subscribe("ledger.day.archived", handler)

    def test_bound_method_duplicate_detected(self):
        registry = ObserverRegistry()
        seen = []
        registry.subscribe("ledger.day.archived", seen.append)
        with pytest.raises(DuplicateObserverError):
            registry.subscribe("ledger.day.archived", seen.append)
        assert registry.unsubscribe("ledger.day.archived", seen.append) is True

    def test_rejects_non_callable(self):
        with pytest.raises(NotificationBusError):
            ObserverRegistry().subscribe("ledger.day.archived", "nope")

    def test_unsubscribe(self):
        registry = ObserverRegistry()
        handler = lambda n: None
        registry.subscribe("ledger.day.archived", handler)
        assert registry.unsubscribe("ledger.day.archived", handler) is True
        assert registry.unsubscribe("ledger.day.archived", handler) is False
        assert not registry.has_observers("ledger.day.archived")


class TestNotify:
    def test_delivers_payload_in_order(self):
        registry = ObserverRegistry()
        seen = []
        registry.subscribe("ledger.sale.recorded", lambda n: seen.append(("a", n)))
        registry.subscribe("ledger.sale.recorded", lambda n: seen.append(("b", n)))

        result = notify("ledger.sale.recorded", {"qty": 3}, registry)

        assert result["observers_notified"] == 2
        assert [tag for tag, _ in seen] == ["a", "b"]
        assert seen[0][1] == Notification("ledger.sale.recorded", {"qty": 3})

    def test_observer_failure_is_contained(self):
        registry = ObserverRegistry()
        seen = []

        def broken(notification):
            raise RuntimeError("observer down")

        registry.subscribe("ledger.sale.recorded", broken)
        registry.subscribe("ledger.sale.recorded", seen.append)

        result = notify("ledger.sale.recorded", {}, registry)

        assert result["observers_failed"] == 1
        assert result["observers_notified"] == 1
        assert result["failures"][0]["error_type"] == "RuntimeError"
        assert len(seen) == 1

    def test_no_registry_or_observers(self):
        assert notify("ledger.day.archived", {}, None)["observers_notified"] == 0
        assert notify("ledger.day.archived", {}, ObserverRegistry())["failures"] == []
