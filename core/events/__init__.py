"""
Till Notification Bus - Public API
====================================
Observers hear about ledger lifecycle changes and persistence trouble.
"""

from core.events.dispatcher import Notification, notify
from core.events.errors import (
    DuplicateObserverError,
    InvalidNotificationType,
    NotificationBusError,
)
from core.events.registry import ObserverRegistry

__all__ = [
    "notify",
    "Notification",
    "ObserverRegistry",
    "NotificationBusError",
    "InvalidNotificationType",
    "DuplicateObserverError",
]
