"""
Till Notification Bus - Dispatcher
=====================================
Routes ledger notifications to registered observers.

Dispatch behavior:
1. Look up observers by notification_type
2. Execute handlers sequentially
3. Catch observer exceptions per handler and log them
4. Continue to next observer
5. NEVER roll back the ledger mutation that caused the notification

It only routes. The ledger has already changed before anyone hears of it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.events.registry import ObserverRegistry

logger = logging.getLogger("till.events")


@dataclass(frozen=True)
class Notification:
    """A single ledger notification delivered to observers."""

    notification_type: str
    payload: Dict[str, Any] = field(default_factory=dict)


def notify(
    notification_type: str,
    payload: Optional[Dict[str, Any]],
    registry: Optional[ObserverRegistry],
) -> dict:
    """
    Deliver a notification to every observer of its type.

    Returns:
        {
            'notification_type': str,
            'observers_notified': int,
            'observers_failed': int,
            'failures': list[dict]
        }

    This function NEVER raises exceptions.
    """
    result = {
        "notification_type": notification_type,
        "observers_notified": 0,
        "observers_failed": 0,
        "failures": [],
    }

    if registry is None:
        return result

    observers = registry.get_observers(notification_type)
    if not observers:
        logger.debug(f"No observers for '{notification_type}'")
        return result

    notification = Notification(
        notification_type=notification_type,
        payload=dict(payload or {}),
    )

    for handler in observers:
        handler_name = getattr(handler, "__qualname__", str(handler))
        try:
            handler(notification)
            result["observers_notified"] += 1
        except Exception as exc:
            result["observers_failed"] += 1
            result["failures"].append({
                "handler": handler_name,
                "error": str(exc),
                "error_type": type(exc).__name__,
            })
            logger.error(
                f"Observer failed: {handler_name} for {notification_type}: {exc}",
                exc_info=True,
            )

    logger.debug(
        f"Notified {notification_type}: "
        f"{result['observers_notified']} ok, "
        f"{result['observers_failed']} failed"
    )
    return result
