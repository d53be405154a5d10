"""Session-scoped collection of live and historical notifications."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime

from notifier.domain.entities import Notification


def merge(
    live: Sequence[Notification], historical: Sequence[Notification]
) -> list[Notification]:
    """Return ``live`` followed by the historical items not already live.

    Live copies win on shared ids. Both inputs must already be free of
    internal duplicates.
    """

    live_ids = {notification.id for notification in live}
    return [*live, *(item for item in historical if item.id not in live_ids)]


def unique_by_id(items: Iterable[Notification]) -> list[Notification]:
    """Return ``items`` without repeated ids, keeping first occurrences in order."""

    unique: list[Notification] = []
    seen: set[int] = set()
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


class NotificationStore:
    """Deduplicated notifications of one session.

    The live list is ordered by arrival, newest first; historical items always
    follow it in :meth:`snapshot`, whatever their timestamps.
    """

    def __init__(self) -> None:
        self._live: list[Notification] = []
        self._live_ids: set[int] = set()
        self._historical: list[Notification] = []
        self._history_loaded = False

    @property
    def live(self) -> list[Notification]:
        return list(self._live)

    @property
    def historical(self) -> list[Notification]:
        return list(self._historical)

    @property
    def history_loaded(self) -> bool:
        return self._history_loaded

    def prepend(self, notification: Notification) -> bool:
        """Store a live notification at the head; re-deliveries of a known id are ignored."""

        if notification.id in self._live_ids:
            return False
        self._live.insert(0, notification)
        self._live_ids.add(notification.id)
        return True

    def load_history(self, items: Iterable[Notification]) -> None:
        """Replace the historical page with ``items``."""

        self._historical = unique_by_id(items)
        self._history_loaded = True

    def snapshot(self) -> list[Notification]:
        return merge(self._live, self._historical)

    def get(self, notification_id: int) -> Notification | None:
        for notification in self.snapshot():
            if notification.id == notification_id:
                return notification
        return None

    def mark_read(self, notification_id: int, read_at: datetime) -> Notification | None:
        """Reflect a successful external "mark read" into the stored copies."""

        def _mark(items: list[Notification]) -> None:
            for index, item in enumerate(items):
                if item.id == notification_id and not item.is_read:
                    items[index] = replace(item, is_read=True, read_at=read_at)

        _mark(self._live)
        _mark(self._historical)
        return self.get(notification_id)

    def unread_count(self) -> int:
        return sum(1 for notification in self.snapshot() if not notification.is_read)

    def clear(self) -> None:
        self._live.clear()
        self._live_ids.clear()
        self._historical = []
        self._history_loaded = False

    def __len__(self) -> int:
        return len(self.snapshot())


__all__ = ["NotificationStore", "merge", "unique_by_id"]
