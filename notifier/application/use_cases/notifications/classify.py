"""Decide whether an inbound event is addressed to the current identity."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import tzinfo
from typing import Any

from pydantic import ValidationError

from notifier.domain.entities import Identity, Notification
from notifier.schemas import TIMEZONE_CONTEXT_KEY, NotificationPayload


def parse_notification(raw: Any, tz: tzinfo | None = None) -> Notification | None:
    """Return ``raw`` as a :class:`Notification`, or ``None`` when it does not fit the wire shape.

    Timestamps are expressed in ``tz``, defaulting to the configured
    application timezone.
    """

    if isinstance(raw, Notification):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        payload = NotificationPayload.model_validate(
            dict(raw), context={TIMEZONE_CONTEXT_KEY: tz}
        )
    except (ValidationError, OverflowError):
        return None
    return payload.to_entity()


def is_addressed_to(identity: Identity, notification: Notification) -> bool:
    """Return ``True`` when both the recipient id and role match ``identity``."""

    return (
        notification.recipient_id == identity.user_id
        and notification.recipient_role == identity.user_role
    )


def accepts(identity: Identity, raw: Any, tz: tzinfo | None = None) -> Notification | None:
    """Return the parsed notification when ``raw`` is for ``identity``.

    Most of the broadcast traffic belongs to other recipients, so a mismatch
    is an ordinary ``None`` rather than an error.
    """

    notification = parse_notification(raw, tz)
    if notification is None or not is_addressed_to(identity, notification):
        return None
    return notification


__all__ = ["accepts", "is_addressed_to", "parse_notification"]
