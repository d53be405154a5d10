"""HTTP client for the request/response notification endpoints."""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from notifier.config import Settings, get_settings

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], "str | None"]

_LIST_ENVELOPE_KEYS = ("data", "content", "notifications")
_COUNT_KEYS = ("count", "unreadCount", "data")


class NotificationApiError(RuntimeError):
    """Raised when a notification endpoint cannot be reached or rejects a call."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def notification_url(settings: Settings, suffix: str = "") -> str:
    """Return the absolute URL of a notification endpoint."""

    base = settings.api_base_url.rstrip("/")
    prefix = "/" + settings.notification_base_path.strip("/")
    return f"{base}{prefix}{suffix}"


def bearer_headers(token: str | None) -> dict[str, str]:
    if not token:
        raise NotificationApiError("Access token not found for notification request")
    return {"Authorization": f"Bearer {token}"}


class NotificationApiClient:
    """Fetch history, unread counts and mark notifications as read."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token_provider: TokenProvider,
        *,
        settings: Settings | None = None,
    ) -> None:
        self._client = client
        self._token_provider = token_provider
        self._settings = settings or get_settings()

    async def fetch_history(self) -> list[dict[str, Any]]:
        """Return the raw historical notifications of the authenticated user."""

        body = await self._request("GET", "")
        items = _unwrap_list(body)
        if items is None:
            raise NotificationApiError("Unexpected notification history payload")
        return [item for item in items if isinstance(item, dict)]

    async def mark_read(self, notification_id: int) -> None:
        """Ask the server to mark ``notification_id`` as read."""

        await self._request("PATCH", f"/{notification_id}/read")

    async def unread_count(self) -> int:
        """Return the server-side unread counter."""

        body = await self._request("GET", "/unread/count")
        count = _unwrap_count(body)
        if count is None:
            raise NotificationApiError("Unexpected unread count payload")
        return count

    async def _request(self, method: str, suffix: str) -> Any:
        url = notification_url(self._settings, suffix)
        headers = bearer_headers(self._token_provider())
        try:
            response = await self._client.request(
                method, url, headers=headers, timeout=self._settings.request_timeout
            )
        except httpx.HTTPError as exc:
            logger.warning("Notification request %s %s failed: %s", method, url, exc)
            raise NotificationApiError(f"Notification request failed: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "Notification request %s %s responded with status %s",
                method,
                url,
                response.status_code,
            )
            raise NotificationApiError(
                f"Notification request responded with status {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise NotificationApiError("Notification response is not valid JSON") from exc


def _unwrap_list(body: Any) -> list[Any] | None:
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in _LIST_ENVELOPE_KEYS:
            nested = body.get(key)
            if isinstance(nested, list):
                return nested
            # Paged envelopes nest the page under ``data``.
            if isinstance(nested, dict):
                inner = _unwrap_list(nested)
                if inner is not None:
                    return inner
    return None


def _unwrap_count(body: Any) -> int | None:
    if isinstance(body, bool):
        return None
    if isinstance(body, int):
        return body
    if isinstance(body, dict):
        for key in _COUNT_KEYS:
            value = body.get(key)
            count = _unwrap_count(value)
            if count is not None:
                return count
    return None


__all__ = [
    "NotificationApiClient",
    "NotificationApiError",
    "TokenProvider",
    "bearer_headers",
    "notification_url",
]
