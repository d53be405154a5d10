"""Map a notification to the navigation target it opens."""

from __future__ import annotations

from dataclasses import dataclass

from notifier.config import Settings
from notifier.domain.entities import (
    NOTIFICATION_TYPE_PAYMENT_COMPLETED,
    NOTIFICATION_TYPE_PAYMENT_REQUIRED,
    NOTIFICATION_TYPE_RESERVATION_COMPLETED,
    Notification,
    UserRole,
)


@dataclass(frozen=True)
class NavigationTargets:
    """Fixed destinations of the host application's router."""

    checkout_path: str = "/checkout"
    notifications_path: str = "/notifications"
    owner_reservation_path: str = "/my-page/owner/reservations/{reservation_id}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "NavigationTargets":
        return cls(
            checkout_path=settings.checkout_path,
            notifications_path=settings.notifications_path,
            owner_reservation_path=settings.owner_reservation_path,
        )

    def owner_reservation(self, reservation_id: int) -> str:
        return self.owner_reservation_path.format(reservation_id=reservation_id)


DEFAULT_TARGETS = NavigationTargets()


def route(notification: Notification, targets: NavigationTargets = DEFAULT_TARGETS) -> str:
    """Return the single destination for ``notification``.

    Clauses are evaluated in business-priority order and the first match wins,
    so a ``payment-completed`` without an ``actionUrl`` lands on the listing
    page rather than on checkout. Unknown types always reach the fallback.
    """

    notification_type = notification.normalized_type

    if notification_type == NOTIFICATION_TYPE_PAYMENT_REQUIRED:
        return targets.checkout_path

    if notification_type == NOTIFICATION_TYPE_PAYMENT_COMPLETED and notification.has_action_url():
        return notification.action_url.strip()

    if (
        notification_type == NOTIFICATION_TYPE_RESERVATION_COMPLETED
        and notification.recipient_role == UserRole.OWNER
        and notification.reservation_id is not None
    ):
        return targets.owner_reservation(notification.reservation_id)

    if notification.has_action_url():
        return notification.action_url.strip()

    return targets.notifications_path


__all__ = ["DEFAULT_TARGETS", "NavigationTargets", "route"]
