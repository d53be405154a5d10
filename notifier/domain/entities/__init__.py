"""Domain entities exposed by the notification session."""

from .identity import Identity, UserRole
from .notification import (
    NOTIFICATION_TYPE_GENERIC,
    NOTIFICATION_TYPE_PAYMENT_COMPLETED,
    NOTIFICATION_TYPE_PAYMENT_REQUIRED,
    NOTIFICATION_TYPE_RESERVATION_COMPLETED,
    Notification,
    normalize_notification_type,
)
from .stream_event import StreamEvent, StreamEventKind

__all__ = [
    "Identity",
    "UserRole",
    "Notification",
    "NOTIFICATION_TYPE_GENERIC",
    "NOTIFICATION_TYPE_PAYMENT_COMPLETED",
    "NOTIFICATION_TYPE_PAYMENT_REQUIRED",
    "NOTIFICATION_TYPE_RESERVATION_COMPLETED",
    "normalize_notification_type",
    "StreamEvent",
    "StreamEventKind",
]
