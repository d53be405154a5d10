"""Retrying decorator around :class:`EventStream`."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from notifier.config import Settings, get_settings
from notifier.domain.entities import Identity, StreamEvent, StreamEventKind

from .event_stream import EventStream, EventStreamError

logger = logging.getLogger(__name__)


class _ConnectionLost(EventStreamError):
    """Internal marker for a stream that failed before delivering anything."""


class ReconnectingStreamHandle:
    """Handle that reopens the wrapped stream with exponential backoff.

    Only the retry budget is added: a single ``OPENED`` is yielded for the
    first successful connection, messages are forwarded unchanged, and one
    ``FAILED`` is yielded once the attempts are exhausted. A connection that
    ends before delivering a message counts as a failed attempt; the budget
    resets only after a connection delivered at least one message.
    """

    def __init__(self, owner: "ReconnectingEventStream", identity: Identity) -> None:
        self.identity = identity
        self._owner = owner
        self._inner = None
        self._closed = False
        self._announced = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def events(self) -> AsyncIterator[StreamEvent]:
        while not self._closed:
            try:
                async for attempt in self._owner.retrying():
                    with attempt:
                        inner_events = await self._connect()
                    if attempt.retry_state.outcome.failed:
                        continue

                    delivered = False
                    ended_by: BaseException | None = None
                    async for event in inner_events:
                        if event.kind is StreamEventKind.OPENED:
                            if self._announced:
                                continue
                            self._announced = True
                        elif event.is_terminal:
                            ended_by = event.error
                            break
                        else:
                            delivered = True
                        yield event

                    if self._closed:
                        return
                    logger.info(
                        "Notification stream for user %s dropped (%s); reconnecting",
                        self.identity.user_id,
                        ended_by or "closed by server",
                    )
                    if delivered:
                        break
                    # Nothing was delivered: charge the drop to this attempt so
                    # the next one waits for the backoff.
                    lost = _ConnectionLost(
                        f"stream ended before delivering a message: {ended_by or 'closed'}"
                    )
                    attempt.retry_state.set_exception((_ConnectionLost, lost, None))
            except EventStreamError as exc:
                if self._closed:
                    return
                self._closed = True
                self._owner._forget(self)
                logger.warning(
                    "Giving up on notification stream for user %s: %s",
                    self.identity.user_id,
                    exc,
                )
                yield StreamEvent.failed(exc)
                return

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._owner._forget(self)
        inner, self._inner = self._inner, None
        if inner is not None:
            await self._owner.inner.close(inner)

    async def _connect(self) -> AsyncIterator[StreamEvent]:
        """Open the wrapped stream and wait for its first item.

        Returns an iterator that replays the ``OPENED`` item followed by the
        rest of the inner handle's events; raises ``_ConnectionLost`` when the
        connection was not accepted.
        """

        if self._closed:
            raise EventStreamError("Stream handle closed while reconnecting")
        inner = self._owner.inner.open(self.identity)
        self._inner = inner
        iterator = inner.events().__aiter__()
        first = await anext(iterator, None)
        if first is None or first.kind is not StreamEventKind.OPENED:
            await self._owner.inner.close(inner)
            self._inner = None
            error = first.error if first is not None else None
            raise _ConnectionLost(str(error or "stream ended before opening"))
        return _replay(first, iterator)


async def _replay(first: StreamEvent, rest: AsyncIterator[StreamEvent]) -> AsyncIterator[StreamEvent]:
    yield first
    async for event in rest:
        yield event


class ReconnectingEventStream:
    """Drop-in replacement for :class:`EventStream` that retries connections.

    Retry timing comes from the ``RECONNECT_*`` settings. The decorator keeps
    the one-open-handle rule of the wrapped stream.
    """

    def __init__(self, inner: EventStream, *, settings: Settings | None = None) -> None:
        self.inner = inner
        self._settings = settings or get_settings()
        self._active: ReconnectingStreamHandle | None = None

    @property
    def active(self) -> ReconnectingStreamHandle | None:
        return self._active

    def retrying(self) -> AsyncRetrying:
        settings = self._settings
        return AsyncRetrying(
            stop=stop_after_attempt(settings.reconnect_max_attempts),
            wait=wait_exponential(
                multiplier=settings.reconnect_backoff_seconds,
                max=settings.reconnect_backoff_max_seconds,
            ),
            retry=retry_if_exception_type(_ConnectionLost),
            before_sleep=_log_retry,
            reraise=True,
        )

    def open(self, identity: Identity) -> ReconnectingStreamHandle:
        if self._active is not None and not self._active.closed:
            raise EventStreamError(
                "A notification stream is already open; close it before opening another"
            )
        handle = ReconnectingStreamHandle(self, identity)
        self._active = handle
        return handle

    async def close(self, handle: ReconnectingStreamHandle) -> None:
        await handle.aclose()

    def _forget(self, handle: ReconnectingStreamHandle) -> None:
        if self._active is handle:
            self._active = None


def _log_retry(retry_state: RetryCallState) -> None:
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.info(
        "Notification stream attempt %s failed; retrying in %.1fs",
        retry_state.attempt_number,
        wait,
    )


__all__ = ["ReconnectingEventStream", "ReconnectingStreamHandle"]
