"""Timezone helpers shared by ingestion, storage and the histogram buckets.

Every stored timestamp is a naive value expressed in the application
timezone (``APP_TIMEZONE``). The domain layer works with aware values and
converts at the repository boundary.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from activity_api.config import get_settings

# ``UTC+2``, ``GMT-05:30`` and ``utc+0530`` style fixed offsets.
_FIXED_OFFSET: Final[re.Pattern[str]] = re.compile(
    r"^(?:utc|gmt)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the timezone named by ``APP_TIMEZONE``, or UTC when it is unusable."""

    name = get_settings().app_timezone.strip()
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return _fixed_offset(name) or timezone.utc


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the app timezone; naive values are assumed to be in it already."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return the storage form of ``value``: app-local wall time without ``tzinfo``."""

    if value is None:
        return None
    return ensure_app_timezone(value).replace(tzinfo=None)


def start_of_app_day(value: date) -> datetime:
    """Midnight of ``value`` in the app timezone."""

    return datetime.combine(value, time.min, tzinfo=get_app_timezone())


def _fixed_offset(name: str) -> tzinfo | None:
    match = _FIXED_OFFSET.match(name)
    if match is None:
        return None
    offset = timedelta(
        hours=int(match["hours"]), minutes=int(match["minutes"] or 0)
    )
    return timezone(-offset if match["sign"] == "-" else offset)
