"""Schemas exposed by the notification adapter."""

from .notification import (
    CredentialUpdate,
    NotificationRead,
    NotificationTargetRead,
    SessionRead,
    UnreadCountRead,
)

__all__ = [
    "CredentialUpdate",
    "NotificationRead",
    "NotificationTargetRead",
    "SessionRead",
    "UnreadCountRead",
]
