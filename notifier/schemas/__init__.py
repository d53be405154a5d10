"""Wire schemas shared by the stream and the request/response endpoints."""

from .notification import TIMEZONE_CONTEXT_KEY, NotificationPayload

__all__ = ["NotificationPayload", "TIMEZONE_CONTEXT_KEY"]
