"""Security helpers for reading access token claims."""

from __future__ import annotations

from typing import Any

from jose import JWTError, jwt

from notifier.config import Settings, get_settings


def decode_access_token(token: str, settings: Settings | None = None) -> dict[str, Any]:
    """Return the claims carried by ``token``.

    The signature is verified only when ``JWT_SECRET_KEY`` is configured; clients
    usually do not hold the signing key, so by default claims are read as-is.
    Expiry is always enforced.
    """

    settings = settings or get_settings()
    verify_signature = bool(settings.jwt_secret_key)
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key or "",
            algorithms=[settings.jwt_algorithm],
            options={
                "verify_signature": verify_signature,
                "verify_aud": False,
                "verify_sub": False,
            },
        )
    except (JWTError, AttributeError, TypeError) as exc:
        raise ValueError("Could not validate credentials") from exc


__all__ = ["decode_access_token"]
