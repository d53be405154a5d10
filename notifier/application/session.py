"""Facade wiring the notification session components together."""

from __future__ import annotations

import logging
from typing import Callable

import httpx

from notifier.application.use_cases.identity import IdentityResolver
from notifier.application.use_cases.notifications import (
    NavigationTargets,
    NotificationStore,
    SubscriptionManager,
    SubscriptionState,
    parse_notification,
    route,
)
from notifier.application.use_cases.notifications.subscription import EventStreamLike
from notifier.config import Settings, get_settings
from notifier.domain.entities import Identity, Notification
from notifier.infrastructure.api_client import NotificationApiClient, NotificationApiError
from notifier.infrastructure.credentials import CredentialStore
from notifier.infrastructure.notifications import (
    EventEmitter,
    EventStream,
    ReconnectingEventStream,
)
from notifier.utils import now_in_app_timezone, resolve_timezone

logger = logging.getLogger(__name__)


class NotificationSession:
    """Realtime notifications of one signed-in client.

    The session follows :attr:`credentials`: setting a token connects the
    stream for the identity it carries, clearing it disconnects and empties
    the store. History is fetched lazily, once per identity.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        settings: Settings | None = None,
        credentials: CredentialStore | None = None,
        stream: EventStreamLike | None = None,
        api: NotificationApiClient | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.credentials = credentials or CredentialStore()
        if stream is None:
            stream = EventStream(client, self.credentials.get, settings=self._settings)
            if self._settings.reconnect_enabled:
                stream = ReconnectingEventStream(stream, settings=self._settings)
        self.api = api or NotificationApiClient(
            client, self.credentials.get, settings=self._settings
        )
        self.resolver = IdentityResolver(self._settings)
        self.timezone = resolve_timezone(self._settings.app_timezone)
        self.store = NotificationStore()
        self.manager = SubscriptionManager(stream, self.store, tz=self.timezone)
        self.targets = NavigationTargets.from_settings(self._settings)
        self._unwatch: Callable[[], None] | None = None

    @property
    def events(self) -> EventEmitter:
        """Channel carrying ``notification``, ``error`` and ``state`` events."""

        return self.manager.events

    @property
    def identity(self) -> Identity | None:
        return self.manager.identity

    @property
    def state(self) -> SubscriptionState:
        return self.manager.state

    async def start(self) -> None:
        """Begin following the credential store."""

        if self._unwatch is not None:
            return
        self._unwatch = self.resolver.watch(self.credentials, self.manager.on_identity_changed)
        await self.settle()

    async def close(self) -> None:
        """Stop following credentials and close the live stream."""

        if self._unwatch is not None:
            self._unwatch()
            self._unwatch = None
        await self.resolver.events.drain()
        await self.manager.stop()
        await self.manager.events.drain()

    async def settle(self) -> None:
        """Wait until pending identity changes have been applied."""

        await self.resolver.events.drain()
        await self.manager.events.drain()

    async def load_history(self) -> list[Notification]:
        """Fetch the historical page for the current identity into the store.

        Raises :class:`~notifier.infrastructure.api_client.NotificationApiError`
        when the endpoint cannot be used. A page that arrives after the
        identity changed is discarded.
        """

        identity = self.identity
        if identity is None:
            return []
        raw_items = await self.api.fetch_history()
        if self.identity != identity:
            logger.info("Discarding notification history fetched for a previous identity")
            return []

        items: list[Notification] = []
        for raw in raw_items:
            notification = parse_notification(raw, self.timezone)
            if notification is None:
                logger.warning("Skipping malformed historical notification: %.200r", raw)
                continue
            items.append(notification)
        self.store.load_history(items)
        logger.debug("Loaded %s historical notifications for user %s", len(items), identity.user_id)
        return self.store.historical

    async def notifications(self) -> list[Notification]:
        """Return live and historical notifications, loading history on first use.

        A failing history request degrades to the live list.
        """

        if self.identity is not None and not self.store.history_loaded:
            try:
                await self.load_history()
            except NotificationApiError as exc:
                logger.warning("Notification history unavailable: %s", exc)
        return self.store.snapshot()

    def get(self, notification_id: int) -> Notification | None:
        return self.store.get(notification_id)

    def target_for(self, notification_id: int) -> str | None:
        """Return the navigation target of a stored notification."""

        notification = self.store.get(notification_id)
        if notification is None:
            return None
        return route(notification, self.targets)

    def route(self, notification: Notification) -> str:
        return route(notification, self.targets)

    async def mark_read(self, notification_id: int) -> Notification | None:
        """Mark a stored notification as read on the server and in the store.

        Returns ``None`` when the notification is unknown to the session.
        """

        notification = self.store.get(notification_id)
        if notification is None:
            return None
        if notification.is_read:
            return notification
        await self.api.mark_read(notification_id)
        return self.store.mark_read(notification_id, now_in_app_timezone(self.timezone))

    def unread_count(self) -> int:
        return self.store.unread_count()

    async def fetch_unread_count(self) -> int:
        """Return the unread counter kept by the server."""

        return await self.api.unread_count()


__all__ = ["NotificationSession"]
