"""Tests for the application timezone helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from notifier.utils import datetime as datetime_utils


@pytest.fixture(autouse=True)
def _clear_timezone_cache():
    datetime_utils.get_app_timezone.cache_clear()
    yield
    datetime_utils.get_app_timezone.cache_clear()


def test_naive_values_are_read_as_app_wall_time(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "UTC+9")

    value = datetime_utils.ensure_app_timezone(datetime(2024, 5, 1, 10, 0))

    assert value.hour == 10
    assert value.utcoffset() == timedelta(hours=9)


def test_aware_values_are_converted(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "UTC+09:00")

    value = datetime_utils.ensure_app_timezone(datetime(2024, 5, 1, 1, 0, tzinfo=timezone.utc))

    assert value.hour == 10


def test_none_is_preserved():
    assert datetime_utils.ensure_app_timezone(None) is None


@pytest.mark.parametrize(
    ("name", "offset"),
    [
        ("UTC-05:00", timedelta(hours=-5)),
        ("GMT+5:30", timedelta(hours=5, minutes=30)),
        ("", timedelta(hours=9)),
        ("Not/AZone", timedelta(hours=9)),
    ],
)
def test_resolve_timezone(name, offset):
    tz = datetime_utils.resolve_timezone(name)

    assert datetime(2024, 5, 1, tzinfo=tz).utcoffset() == offset


def test_explicit_timezone_overrides_settings(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "UTC+9")
    tz = datetime_utils.resolve_timezone("UTC-3")

    value = datetime_utils.ensure_app_timezone(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc), tz)

    assert value.utcoffset() == timedelta(hours=-3)
    assert value.hour == 9
    assert datetime_utils.now_in_app_timezone(tz).utcoffset() == timedelta(hours=-3)
