"""Pydantic models describing the notification adapter payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from notifier.domain.entities import Notification, UserRole


class NotificationRead(BaseModel):
    """Representation of a stored notification and where it leads."""

    id: int
    recipient_id: int
    recipient_role: UserRole
    type: str
    title: str
    message: str
    reservation_id: int | None = None
    action_url: str | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime
    expires_at: datetime | None = None
    target: str = Field(..., description="Navigation target opened by the notification")

    @classmethod
    def from_entity(cls, notification: Notification, target: str) -> "NotificationRead":
        return cls(
            id=notification.id,
            recipient_id=notification.recipient_id,
            recipient_role=notification.recipient_role,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            reservation_id=notification.reservation_id,
            action_url=notification.action_url,
            is_read=notification.is_read,
            read_at=notification.read_at,
            created_at=notification.created_at,
            expires_at=notification.expires_at,
            target=target,
        )


class NotificationTargetRead(BaseModel):
    id: int
    target: str


class UnreadCountRead(BaseModel):
    count: int = Field(..., ge=0)


class SessionRead(BaseModel):
    """Current subscription state of the session."""

    state: str
    user_id: int | None = None
    user_role: UserRole | None = None


class CredentialUpdate(BaseModel):
    """Tokens handed over by the authentication flow."""

    access_token: str = Field(..., min_length=1)
    refresh_token: str | None = None


__all__ = [
    "CredentialUpdate",
    "NotificationRead",
    "NotificationTargetRead",
    "SessionRead",
    "UnreadCountRead",
]
