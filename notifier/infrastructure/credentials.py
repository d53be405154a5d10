"""In-memory credential storage with change notifications."""

from __future__ import annotations

import logging
from typing import Callable

from notifier.infrastructure.notifications.emitter import EventEmitter

logger = logging.getLogger(__name__)

CREDENTIAL_CHANGED = "credential_changed"


class CredentialStore:
    """Hold the session's access and refresh tokens.

    Every write emits ``credential_changed`` with the new access token (or
    ``None`` after ``clear``). The store only keeps the strings; decoding is
    left to the identity resolver.
    """

    def __init__(self, access_token: str | None = None, refresh_token: str | None = None) -> None:
        self._access_token = access_token or None
        self._refresh_token = refresh_token or None
        self.events = EventEmitter()

    def get(self) -> str | None:
        """Return the current access token."""

        return self._access_token

    def get_refresh_token(self) -> str | None:
        return self._refresh_token

    def set(self, access_token: str, refresh_token: str | None = None) -> None:
        """Store a new access token, keeping the previous refresh token when none is given."""

        if not access_token:
            raise ValueError("access_token must not be empty")
        self._access_token = access_token
        if refresh_token:
            self._refresh_token = refresh_token
        logger.debug("Access token updated")
        self.events.emit(CREDENTIAL_CHANGED, self._access_token)

    def clear(self) -> None:
        """Forget both tokens (logout)."""

        had_token = self._access_token is not None
        self._access_token = None
        self._refresh_token = None
        if had_token:
            logger.debug("Credentials cleared")
        self.events.emit(CREDENTIAL_CHANGED, None)

    def subscribe(self, listener: Callable[[str | None], object]) -> Callable[[], None]:
        """Register ``listener`` for credential changes; returns the unsubscribe function."""

        return self.events.on(CREDENTIAL_CHANGED, listener)


__all__ = ["CREDENTIAL_CHANGED", "CredentialStore"]
