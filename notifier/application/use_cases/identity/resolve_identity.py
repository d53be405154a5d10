"""Derive the session identity from the current credential."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable

from notifier.config import Settings, get_settings
from notifier.domain.entities import Identity, UserRole
from notifier.infrastructure.credentials import CredentialStore
from notifier.infrastructure.notifications.emitter import EventEmitter
from notifier.infrastructure.security import decode_access_token

logger = logging.getLogger(__name__)

IDENTITY_CHANGED = "identity_changed"
USER_ID_CLAIMS = ("userId", "id", "sub")
ROLE_CLAIMS = ("role", "userRole", "auth")

IdentityListener = Callable[["Identity | None"], Any]

_UNSET = object()


def identity_from_claims(claims: Mapping[str, Any]) -> Identity | None:
    """Build an :class:`Identity` from decoded token claims."""

    user_id = _first_user_id(claims)
    role = _first_role(claims)
    if user_id is None or role is None:
        return None
    return Identity(user_id=user_id, user_role=role)


def _first_user_id(claims: Mapping[str, Any]) -> int | None:
    for key in USER_ID_CLAIMS:
        value = claims.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            return int(str(value).strip())
        except ValueError:
            continue
    return None


def _first_role(claims: Mapping[str, Any]) -> UserRole | None:
    for key in ROLE_CLAIMS:
        value = claims.get(key)
        # Authorities may arrive as a list such as ``["ROLE_OWNER"]``.
        candidates = value if isinstance(value, (list, tuple)) else [value]
        for candidate in candidates:
            if candidate is None:
                continue
            try:
                return UserRole.parse(candidate)
            except ValueError:
                continue
    return None


class IdentityResolver:
    """Turn credentials into identities and follow credential changes.

    Changes are published as ``identity_changed`` on :attr:`events`, so
    coroutine listeners (such as the subscription manager) are scheduled on
    the running loop in the order the credentials changed.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._last: Identity | None | object = _UNSET
        self.events = EventEmitter()

    def resolve(self, credential: str | None) -> Identity | None:
        """Return the identity carried by ``credential``.

        Never raises: missing, malformed or expired credentials resolve to
        ``None`` and malformed ones are logged.
        """

        if not credential:
            return None
        settings = self._settings or get_settings()
        try:
            claims = decode_access_token(credential, settings)
        except ValueError as exc:
            logger.warning("Ignoring unusable access token: %s", exc.__cause__ or exc)
            return None

        identity = identity_from_claims(claims)
        if identity is None:
            logger.warning("Access token does not carry a usable user id and role")
        return identity

    def watch(
        self, credentials: CredentialStore, listener: IdentityListener
    ) -> Callable[[], None]:
        """Call ``listener`` whenever the identity derived from ``credentials`` changes.

        The current identity is delivered immediately. A refreshed token that
        resolves to the same identity is not reported.
        """

        def _on_credential(credential: str | None) -> None:
            identity = self.resolve(credential)
            if identity == self._last:
                return
            self._last = identity
            self.events.emit(IDENTITY_CHANGED, identity)

        self._last = _UNSET
        remove_listener = self.events.on(IDENTITY_CHANGED, listener)
        unsubscribe = credentials.subscribe(_on_credential)
        _on_credential(credentials.get())

        def _stop_watching() -> None:
            unsubscribe()
            remove_listener()

        return _stop_watching


__all__ = [
    "IDENTITY_CHANGED",
    "IdentityListener",
    "IdentityResolver",
    "ROLE_CLAIMS",
    "USER_ID_CLAIMS",
    "identity_from_claims",
]
