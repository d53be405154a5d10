"""Identity resolution use cases."""

from .resolve_identity import (
    IDENTITY_CHANGED,
    IdentityResolver,
    identity_from_claims,
)

__all__ = ["IDENTITY_CHANGED", "IdentityResolver", "identity_from_claims"]
