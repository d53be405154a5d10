"""Lifecycle of the live notification subscription."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from datetime import tzinfo
from enum import Enum
from typing import Any, Protocol

from notifier.domain.entities import Identity, StreamEvent, StreamEventKind
from notifier.infrastructure.notifications.emitter import EventEmitter

from .classify import is_addressed_to, parse_notification
from .store import NotificationStore

logger = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification"
ERROR_EVENT = "error"
STATE_EVENT = "state"


class SubscriptionState(str, Enum):
    """States of :class:`SubscriptionManager`."""

    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSING = "closing"


class StreamHandleLike(Protocol):
    identity: Identity

    @property
    def closed(self) -> bool: ...

    def events(self) -> AsyncIterator[StreamEvent]: ...


class EventStreamLike(Protocol):
    def open(self, identity: Identity) -> StreamHandleLike: ...

    async def close(self, handle: StreamHandleLike) -> None: ...


class SubscriptionManager:
    """Own the single stream handle of a session and feed the store from it.

    ``start`` connects for an identity, ``stop`` disconnects and forgets it.
    Transitions run one at a time: a changed identity fully closes the old
    handle before the new one is opened. Accepted notifications are prepended
    to :attr:`store` in delivery order and re-emitted as ``notification`` on
    :attr:`events`; terminal stream failures, and unexpected errors raised
    while reading the stream, are emitted as ``error`` and leave the manager
    idle.
    """

    def __init__(
        self,
        stream: EventStreamLike,
        store: NotificationStore | None = None,
        *,
        events: EventEmitter | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._stream = stream
        self.store = store if store is not None else NotificationStore()
        self.events = events or EventEmitter()
        self._tz = tz
        self._state = SubscriptionState.IDLE
        self._identity: Identity | None = None
        self._handle: StreamHandleLike | None = None
        self._task: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_connected(self) -> bool:
        return self._handle is not None

    async def start(self, identity: Identity | None) -> None:
        """Subscribe for ``identity``; ``None`` behaves like :meth:`stop`."""

        async with self._lock:
            await self._switch(identity)

    async def stop(self) -> None:
        """Close the subscription and forget the identity (logout)."""

        async with self._lock:
            await self._switch(None)

    async def on_identity_changed(self, identity: Identity | None) -> None:
        """Listener for :class:`IdentityResolver` changes."""

        await self.start(identity)

    async def wait_closed(self) -> None:
        """Wait until the current stream ends on its own."""

        task = self._task
        if task is not None and task is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _switch(self, identity: Identity | None) -> None:
        if (
            identity is not None
            and identity == self._identity
            and self._state in (SubscriptionState.CONNECTING, SubscriptionState.ACTIVE)
        ):
            return

        if self._handle is not None:
            await self._teardown()

        if identity != self._identity:
            if self._identity is not None:
                logger.info("Session identity changed; clearing stored notifications")
                self.store.clear()
            self._identity = identity

        if identity is None:
            return

        handle = self._stream.open(identity)
        self._handle = handle
        self._set_state(SubscriptionState.CONNECTING)
        self._task = asyncio.create_task(self._pump(handle, identity))

    async def _teardown(self) -> None:
        handle, task = self._handle, self._task
        self._handle = None
        self._task = None
        self._set_state(SubscriptionState.CLOSING)
        try:
            if task is not None and task is not asyncio.current_task():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        finally:
            await self._stream.close(handle)
            self._set_state(SubscriptionState.IDLE)

    async def _pump(self, handle: StreamHandleLike, identity: Identity) -> None:
        try:
            async for event in handle.events():
                if handle is not self._handle:
                    break
                if event.kind is StreamEventKind.OPENED:
                    self._set_state(SubscriptionState.ACTIVE)
                elif event.kind is StreamEventKind.MESSAGE:
                    if self._state is SubscriptionState.CONNECTING:
                        self._set_state(SubscriptionState.ACTIVE)
                    self._deliver(identity, event.payload)
                elif event.kind is StreamEventKind.FAILED:
                    logger.warning(
                        "Live notifications stopped for user %s: %s",
                        identity.user_id,
                        event.error,
                    )
                    self.events.emit(ERROR_EVENT, event.error)
                else:
                    logger.info("Live notifications ended for user %s", identity.user_id)
        except Exception as exc:
            logger.exception("Live notifications for user %s crashed", identity.user_id)
            if handle is self._handle:
                self.events.emit(ERROR_EVENT, exc)
        finally:
            if handle is self._handle:
                self._handle = None
                self._task = None
                await self._stream.close(handle)
                self._set_state(SubscriptionState.IDLE)

    def _deliver(self, identity: Identity, payload: Any) -> None:
        notification = parse_notification(payload, self._tz)
        if notification is None:
            logger.warning("Dropping malformed notification payload: %.200r", payload)
            return
        if not is_addressed_to(identity, notification):
            logger.debug("Discarding notification %s for another recipient", notification.id)
            return
        if not self.store.prepend(notification):
            logger.debug("Ignoring re-delivered notification %s", notification.id)
            return
        self.events.emit(NOTIFICATION_EVENT, notification)

    def _set_state(self, state: SubscriptionState) -> None:
        if state is self._state:
            return
        logger.debug("Subscription state %s -> %s", self._state.value, state.value)
        self._state = state
        self.events.emit(STATE_EVENT, state)


__all__ = [
    "ERROR_EVENT",
    "NOTIFICATION_EVENT",
    "STATE_EVENT",
    "SubscriptionManager",
    "SubscriptionState",
]
