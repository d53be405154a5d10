"""Domain entity representing a notification delivered to a session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .identity import UserRole

NOTIFICATION_TYPE_PAYMENT_REQUIRED = "payment-required"
NOTIFICATION_TYPE_PAYMENT_COMPLETED = "payment-completed"
NOTIFICATION_TYPE_RESERVATION_COMPLETED = "reservation-completed"
NOTIFICATION_TYPE_GENERIC = "generic"


def normalize_notification_type(value: str) -> str:
    """Return the comparison form of a type tag (``PAYMENT_REQUIRED`` -> ``payment-required``)."""

    return value.strip().lower().replace("_", "-")


@dataclass(frozen=True)
class Notification:
    """Information message addressed to one recipient.

    Instances are created server-side and only stored by the session; the
    ``is_read``/``read_at`` pair is replaced when an external "mark read" call
    succeeds.
    """

    id: int
    recipient_id: int
    recipient_role: UserRole
    type: str
    title: str
    message: str
    created_at: datetime
    is_read: bool = False
    reservation_id: int | None = None
    action_url: str | None = None
    read_at: datetime | None = None
    expires_at: datetime | None = None

    @property
    def normalized_type(self) -> str:
        """Type tag in comparison form."""

        return normalize_notification_type(self.type)

    def has_action_url(self) -> bool:
        """Return ``True`` when the sender supplied a non-blank navigation target."""

        return bool(self.action_url and self.action_url.strip())


__all__ = [
    "NOTIFICATION_TYPE_GENERIC",
    "NOTIFICATION_TYPE_PAYMENT_COMPLETED",
    "NOTIFICATION_TYPE_PAYMENT_REQUIRED",
    "NOTIFICATION_TYPE_RESERVATION_COMPLETED",
    "Notification",
    "normalize_notification_type",
]
