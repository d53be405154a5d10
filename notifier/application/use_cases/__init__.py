"""Aggregate application use cases."""

from .identity import IdentityResolver
from .notifications import NotificationStore, SubscriptionManager, accepts, route

__all__ = [
    "IdentityResolver",
    "NotificationStore",
    "SubscriptionManager",
    "accepts",
    "route",
]
