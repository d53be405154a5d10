"""Timezone handling for timestamps received from the marketplace API."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notifier.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "Asia/Seoul"
_DEFAULT_OFFSET: Final[tzinfo] = timezone(timedelta(hours=9), "KST")
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


def resolve_timezone(name: str | None) -> tzinfo:
    """Turn an ``APP_TIMEZONE`` value into a ``tzinfo``.

    IANA names and ``UTC+9``-style offsets are accepted. Blank or unknown
    values fall back to ``Asia/Seoul``, the marketplace's home timezone.
    """

    tz_name = (name or "").strip() or _DEFAULT_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        match = _OFFSET_PATTERN.match(tz_name)
        if match:
            sign = -1 if match.group("sign") == "-" else 1
            offset = timedelta(
                hours=int(match.group("hours")),
                minutes=int(match.group("minutes") or 0),
            )
            return timezone(sign * offset)
    try:
        return ZoneInfo(_DEFAULT_TIMEZONE)
    except ZoneInfoNotFoundError:
        # Hosts without tzdata still get Korea Standard Time.
        return _DEFAULT_OFFSET


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Timezone configured in the process-wide settings."""

    return resolve_timezone(get_settings().app_timezone)


def now_in_app_timezone(tz: tzinfo | None = None) -> datetime:
    return datetime.now(tz=tz or get_app_timezone())


def ensure_app_timezone(value: datetime | None, tz: tzinfo | None = None) -> datetime | None:
    """Express ``value`` in ``tz`` (the configured timezone by default).

    The API serializes server-local timestamps without an offset, so naive
    values are read as wall time of that timezone. Raises ``OverflowError``
    when the converted value leaves the supported datetime range.
    """

    if value is None:
        return None

    tz = tz or get_app_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)
