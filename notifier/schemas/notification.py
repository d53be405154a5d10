"""Pydantic model describing the notification wire shape."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from notifier.domain.entities import Notification, UserRole
from notifier.utils import ensure_app_timezone

# Key of the validation context holding the session's ``tzinfo``.
TIMEZONE_CONTEXT_KEY = "timezone"


class NotificationPayload(BaseModel):
    """JSON object pushed over the stream or returned by the history endpoint.

    Keys are camelCase on the wire. Fields the session does not use (for
    example ``isSent``/``sentAt``) are ignored. Timestamps are expressed in
    the timezone passed as ``context={"timezone": tz}`` to ``model_validate``,
    or in the configured application timezone when none is given.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    recipient_id: int = Field(alias="recipientId")
    recipient_role: UserRole = Field(alias="recipientRole")
    type: str = Field(min_length=1)
    title: str
    message: str
    reservation_id: int | None = Field(default=None, alias="reservationId")
    action_url: str | None = Field(default=None, alias="actionUrl")
    is_read: bool = Field(alias="isRead")
    read_at: datetime | None = Field(default=None, alias="readAt")
    created_at: datetime = Field(alias="createdAt")
    expires_at: datetime | None = Field(default=None, alias="expiresAt")

    @field_validator("recipient_role", mode="before")
    @classmethod
    def _parse_role(cls, value: Any) -> UserRole:
        return UserRole.parse(value)

    @field_validator("read_at", "created_at", "expires_at")
    @classmethod
    def _localize(cls, value: datetime | None, info: ValidationInfo) -> datetime | None:
        tz = (info.context or {}).get(TIMEZONE_CONTEXT_KEY)
        try:
            return ensure_app_timezone(value, tz)
        except OverflowError as exc:
            raise ValueError(f"{info.field_name} is out of the supported range") from exc

    def to_entity(self) -> Notification:
        """Return the domain representation of this payload."""

        return Notification(
            id=self.id,
            recipient_id=self.recipient_id,
            recipient_role=self.recipient_role,
            type=self.type,
            title=self.title,
            message=self.message,
            created_at=self.created_at,
            is_read=self.is_read,
            reservation_id=self.reservation_id,
            action_url=self.action_url,
            read_at=self.read_at,
            expires_at=self.expires_at,
        )


__all__ = ["NotificationPayload", "TIMEZONE_CONTEXT_KEY"]
