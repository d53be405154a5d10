"""Tests for notification navigation targets."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from notifier.application.use_cases.notifications import NavigationTargets, route
from notifier.config import Settings
from notifier.domain.entities import Notification, UserRole


def _notification(
    notification_type: str,
    *,
    role: UserRole = UserRole.CUSTOMER,
    action_url: str | None = None,
    reservation_id: int | None = None,
) -> Notification:
    return Notification(
        id=1,
        recipient_id=7,
        recipient_role=role,
        type=notification_type,
        title="title",
        message="message",
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        action_url=action_url,
        reservation_id=reservation_id,
    )


@pytest.mark.parametrize(
    ("notification", "expected"),
    [
        (_notification("payment-required"), "/checkout"),
        (_notification("payment-required", action_url="/x"), "/checkout"),
        (_notification("payment-completed", action_url="/r/9"), "/r/9"),
        (_notification("payment-completed"), "/notifications"),
        (
            _notification("reservation-completed", role=UserRole.OWNER, reservation_id=42),
            "/my-page/owner/reservations/42",
        ),
        (
            _notification("reservation-completed", role=UserRole.CUSTOMER, reservation_id=42),
            "/notifications",
        ),
        (
            _notification(
                "reservation-completed",
                role=UserRole.CUSTOMER,
                reservation_id=42,
                action_url="/mine/42",
            ),
            "/mine/42",
        ),
        (_notification("reservation-completed", role=UserRole.OWNER), "/notifications"),
        (_notification("coupon-issued", action_url="/coupons"), "/coupons"),
        (_notification("coupon-issued"), "/notifications"),
    ],
)
def test_route_follows_priority_order(notification, expected):
    assert route(notification) == expected


@pytest.mark.parametrize("action_url", ["", "   "])
def test_blank_action_url_counts_as_absent(action_url):
    assert route(_notification("generic", action_url=action_url)) == "/notifications"


@pytest.mark.parametrize("notification_type", ["PAYMENT_REQUIRED", "Payment-Required"])
def test_type_comparison_is_normalized(notification_type):
    assert route(_notification(notification_type)) == "/checkout"


def test_targets_follow_settings():
    targets = NavigationTargets.from_settings(
        Settings(
            _env_file=None,
            checkout_path="/pay",
            notifications_path="/inbox",
            owner_reservation_path="/owner/bookings/{reservation_id}",
        )
    )

    assert route(_notification("payment-required"), targets) == "/pay"
    assert route(_notification("unknown"), targets) == "/inbox"
    owner = _notification("reservation-completed", role=UserRole.OWNER, reservation_id=3)
    assert route(owner, targets) == "/owner/bookings/3"


def test_settings_reject_owner_path_without_placeholder():
    with pytest.raises(ValueError):
        Settings(_env_file=None, owner_reservation_path="/owner/bookings")
