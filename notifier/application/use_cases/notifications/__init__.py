"""Use cases for classifying, storing and routing notifications."""

from .classify import accepts, is_addressed_to, parse_notification
from .routing import DEFAULT_TARGETS, NavigationTargets, route
from .store import NotificationStore, merge, unique_by_id
from .subscription import (
    ERROR_EVENT,
    NOTIFICATION_EVENT,
    STATE_EVENT,
    SubscriptionManager,
    SubscriptionState,
)

__all__ = [
    "accepts",
    "is_addressed_to",
    "parse_notification",
    "DEFAULT_TARGETS",
    "NavigationTargets",
    "route",
    "NotificationStore",
    "merge",
    "unique_by_id",
    "ERROR_EVENT",
    "NOTIFICATION_EVENT",
    "STATE_EVENT",
    "SubscriptionManager",
    "SubscriptionState",
]
