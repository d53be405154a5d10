"""Domain entity representing the authenticated session identity."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_ROLE_PREFIX = "ROLE_"


class UserRole(str, Enum):
    """Account kinds that can receive notifications."""

    CUSTOMER = "CUSTOMER"
    OWNER = "OWNER"

    @classmethod
    def parse(cls, value: object) -> "UserRole":
        """Return the role named by ``value``.

        Matching is case-insensitive and tolerates the ``ROLE_`` prefix used by
        the API's authorities (``ROLE_OWNER``). Raises ``ValueError`` for
        anything else.
        """

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unsupported user role: {value!r}")
        normalized = value.strip().upper()
        if normalized.startswith(_ROLE_PREFIX):
            normalized = normalized[len(_ROLE_PREFIX) :]
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unsupported user role: {value!r}") from exc


@dataclass(frozen=True)
class Identity:
    """The ``(user_id, user_role)`` pair the session is authenticated as."""

    user_id: int
    user_role: UserRole


__all__ = ["Identity", "UserRole"]
