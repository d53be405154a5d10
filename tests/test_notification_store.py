"""Tests for the session notification store."""

from __future__ import annotations

from datetime import datetime, timezone

from notifier.application.use_cases.notifications import NotificationStore, merge
from notifier.domain.entities import Notification, UserRole

CREATED_AT = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def _notification(notification_id: int, **overrides) -> Notification:
    values = {
        "id": notification_id,
        "recipient_id": 7,
        "recipient_role": UserRole.CUSTOMER,
        "type": "generic",
        "title": f"Notification {notification_id}",
        "message": "message",
        "created_at": CREATED_AT,
    }
    values.update(overrides)
    return Notification(**values)


def _ids(items) -> list[int]:
    return [item.id for item in items]


def test_prepend_keeps_newest_first():
    store = NotificationStore()

    for notification_id in (1, 2, 3):
        assert store.prepend(_notification(notification_id)) is True

    assert _ids(store.live) == [3, 2, 1]


def test_prepend_ignores_redelivered_id():
    store = NotificationStore()
    store.prepend(_notification(1, title="first"))
    store.prepend(_notification(2))

    assert store.prepend(_notification(1, title="again")) is False

    assert _ids(store.live) == [2, 1]
    assert store.get(1).title == "first"


def test_merge_places_live_before_historical_and_live_copy_wins():
    live = [_notification(5, title="live")]
    historical = [_notification(4), _notification(5, title="historical"), _notification(3)]

    merged = merge(live, historical)

    assert _ids(merged) == [5, 4, 3]
    assert merged[0].title == "live"


def test_merge_ignores_timestamps():
    newer = datetime(2030, 1, 1, tzinfo=timezone.utc)
    live = [_notification(1)]
    historical = [_notification(2, created_at=newer)]

    assert _ids(merge(live, historical)) == [1, 2]


def test_snapshot_has_unique_ids():
    store = NotificationStore()
    store.prepend(_notification(2))
    store.load_history([_notification(1), _notification(2), _notification(1), _notification(0)])

    snapshot = store.snapshot()

    assert _ids(snapshot) == [2, 1, 0]
    assert len(store) == 3
    assert store.history_loaded is True


def test_mark_read_updates_live_and_historical_copies():
    store = NotificationStore()
    store.prepend(_notification(1))
    store.load_history([_notification(1), _notification(2)])
    read_at = datetime(2024, 5, 2, tzinfo=timezone.utc)

    updated = store.mark_read(1, read_at)

    assert updated.is_read is True
    assert updated.read_at == read_at
    assert all(item.is_read for item in store.historical if item.id == 1)
    assert store.unread_count() == 1


def test_mark_read_unknown_returns_none():
    store = NotificationStore()

    assert store.mark_read(42, datetime.now(tz=timezone.utc)) is None


def test_clear_forgets_everything():
    store = NotificationStore()
    store.prepend(_notification(1))
    store.load_history([_notification(2)])

    store.clear()

    assert store.snapshot() == []
    assert store.history_loaded is False
    assert store.prepend(_notification(1)) is True
