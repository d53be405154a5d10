"""Server-push connection delivering raw notification payloads."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from notifier.config import Settings, get_settings
from notifier.domain.entities import Identity, StreamEvent
from notifier.infrastructure.api_client import TokenProvider, notification_url

from .sse import ServerSentEvent, iter_sse_events

logger = logging.getLogger(__name__)

SUBSCRIBE_SUFFIX = "/subscribe"


class EventStreamError(RuntimeError):
    """Raised for stream misuse and carried by terminal failures."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StreamHandle:
    """One subscription opened by :class:`EventStream`.

    Iterating :meth:`events` performs the HTTP request and yields
    ``OPENED``, then ``MESSAGE`` items, then a single ``FAILED`` or ``CLOSED``.
    A handle can be iterated once.
    """

    def __init__(self, stream: "EventStream", identity: Identity) -> None:
        self.identity = identity
        self._stream = stream
        self._response: httpx.Response | None = None
        self._closed = False
        self._consumed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def events(self) -> AsyncIterator[StreamEvent]:
        if self._closed:
            return
        if self._consumed:
            raise EventStreamError("Stream handle has already been consumed")
        self._consumed = True

        failure: BaseException | None = None
        try:
            self._response = await self._stream._connect(self)
            logger.info(
                "Notification stream opened for user %s (%s)",
                self.identity.user_id,
                self.identity.user_role.value,
            )
            yield StreamEvent.opened()
            async for sse in iter_sse_events(self._response.aiter_lines()):
                payload = _decode_payload(sse)
                if payload is not None:
                    yield StreamEvent.message(payload)
        except (httpx.HTTPError, httpx.StreamError, EventStreamError) as exc:
            failure = exc
        finally:
            closed_by_owner = self._closed
            await self.aclose()

        if closed_by_owner:
            return
        if failure is not None:
            logger.warning(
                "Notification stream for user %s failed: %s", self.identity.user_id, failure
            )
            yield StreamEvent.failed(failure)
        else:
            logger.info("Notification stream for user %s ended", self.identity.user_id)
            yield StreamEvent.closed()

    async def aclose(self) -> None:
        """Release the connection; closing twice is a no-op."""

        if self._closed:
            return
        self._closed = True
        self._stream._forget(self)
        response, self._response = self._response, None
        if response is not None:
            await response.aclose()


class EventStream:
    """Open server-sent-event subscriptions against the notification endpoint.

    At most one handle may be open at a time; opening another before closing
    the current one raises :class:`EventStreamError`. The stream never retries
    on its own.
    """

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
        self._active: StreamHandle | None = None

    @property
    def url(self) -> str:
        return notification_url(self._settings, SUBSCRIBE_SUFFIX)

    @property
    def active(self) -> StreamHandle | None:
        """Handle currently holding the connection, if any."""

        return self._active

    def open(self, identity: Identity) -> StreamHandle:
        if self._active is not None and not self._active.closed:
            raise EventStreamError(
                "A notification stream is already open; close it before opening another"
            )
        handle = StreamHandle(self, identity)
        self._active = handle
        return handle

    async def close(self, handle: StreamHandle) -> None:
        await handle.aclose()

    def _forget(self, handle: StreamHandle) -> None:
        if self._active is handle:
            self._active = None

    async def _connect(self, handle: StreamHandle) -> httpx.Response:
        token = self._token_provider()
        if not token:
            raise EventStreamError("Access token not found for stream subscription")

        request = self._client.build_request(
            "GET",
            self.url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "text/event-stream",
                "Cache-Control": "no-cache",
            },
            timeout=httpx.Timeout(
                self._settings.request_timeout,
                connect=self._settings.stream_connect_timeout,
                read=self._settings.stream_read_timeout,
            ),
        )
        response = await self._client.send(request, stream=True)
        if not response.is_success:
            await response.aclose()
            raise EventStreamError(
                f"Stream subscription rejected with status {response.status_code}",
                status_code=response.status_code,
            )
        return response


def _decode_payload(sse: ServerSentEvent) -> dict[str, Any] | None:
    try:
        payload = json.loads(sse.data)
    except json.JSONDecodeError:
        logger.warning("Dropping non-JSON '%s' event: %.200s", sse.event, sse.data)
        return None
    if not isinstance(payload, dict):
        logger.warning("Dropping '%s' event whose payload is not an object", sse.event)
        return None
    return payload


__all__ = ["EventStream", "EventStreamError", "StreamHandle", "SUBSCRIBE_SUFFIX"]
