"""Services for RequestFlow."""

from requestflow.services.dispatch import (
    NotificationDispatcher,
    CeleryNotificationDispatcher,
    LoggingNotificationDispatcher,
    dispatch_event,
    get_dispatcher,
)
from requestflow.services.notifications import NotificationService

__all__ = [
    "NotificationDispatcher",
    "CeleryNotificationDispatcher",
    "LoggingNotificationDispatcher",
    "dispatch_event",
    "get_dispatcher",
    "NotificationService",
]
