"""
Till Notification Bus - Observer Registry
===========================================
Controls which handlers hear which ledger notifications.

Rules:
- Notification types follow domain.subject.action format
- Multiple observers per notification type allowed
- Duplicate handler for same notification type forbidden
- In-memory only
- Thread-safe (timer threads notify too)
"""

import logging
from threading import Lock
from typing import Callable

from core.events.errors import (
    DuplicateObserverError,
    InvalidNotificationType,
    NotificationBusError,
)

logger = logging.getLogger("till.events")


class ObserverRegistry:
    """
    In-memory registry of notification observers.

    Maps a notification_type to the ordered list of handlers.
    """

    def __init__(self):
        self._observers: dict[str, list[Callable]] = {}
        self._lock = Lock()

    @staticmethod
    def _validate_notification_type(notification_type: str) -> None:
        if not notification_type or not isinstance(notification_type, str):
            raise InvalidNotificationType(notification_type or "")

        parts = notification_type.strip().split(".")
        if len(parts) < 3 or not all(parts):
            raise InvalidNotificationType(notification_type)

    def subscribe(self, notification_type: str, handler: Callable) -> None:
        """
        Register a handler for a notification type.

        Raises:
            InvalidNotificationType: Bad notification type format
            DuplicateObserverError:  Handler already registered
        """
        self._validate_notification_type(notification_type)

        if not callable(handler):
            raise NotificationBusError(
                f"Handler must be callable, got {type(handler)}."
            )

        handler_name = getattr(handler, "__qualname__", str(handler))

        with self._lock:
            handlers = self._observers.setdefault(notification_type, [])
            for existing in handlers:
                if existing == handler:
                    raise DuplicateObserverError(notification_type, handler_name)
            handlers.append(handler)

        logger.info(f"Observer registered: {handler_name} → {notification_type}")

    def unsubscribe(self, notification_type: str, handler: Callable) -> bool:
        """Remove a handler. Returns False if it was not registered."""
        with self._lock:
            handlers = self._observers.get(notification_type, [])
            for index, existing in enumerate(handlers):
                if existing == handler:
                    del handlers[index]
                    return True
        return False

    def get_observers(self, notification_type: str) -> list[Callable]:
        """Snapshot of handlers for a type (empty list is not an error)."""
        with self._lock:
            return list(self._observers.get(notification_type, []))

    def has_observers(self, notification_type: str) -> bool:
        with self._lock:
            return bool(self._observers.get(notification_type))
