"""
Till Notification Bus - Errors
================================
Error types for observer registration.
Dispatch itself never raises; these only surface at wiring time.
"""


class NotificationBusError(Exception):
    """Base error for notification bus operations."""
    pass


class InvalidNotificationType(NotificationBusError):
    """Notification type does not follow domain.subject.action format."""

    def __init__(self, notification_type: str):
        self.notification_type = notification_type
        super().__init__(
            f"Notification type '{notification_type}' does not follow "
            f"domain.subject.action format."
        )


class DuplicateObserverError(NotificationBusError):
    """Same handler already registered for this notification type."""

    def __init__(self, notification_type: str, handler_name: str):
        self.notification_type = notification_type
        self.handler_name = handler_name
        super().__init__(
            f"Handler '{handler_name}' already registered "
            f"for notification type '{notification_type}'."
        )
