"""Resolution of dashboard ``date_range`` presets into lower time bounds."""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Final

from activity_api.domain.errors import InvalidArgument

from .datetime import ensure_app_timezone, now_in_app_timezone, start_of_app_day

_PRESET_DAYS: Final[dict[str, int]] = {
    "week": 7,
    "3days": 3,
    "7days": 7,
    "30days": 30,
    "90days": 90,
}
_CUSTOM_DAYS_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<days>\d{1,4})\s*(?:d|days?)?$", re.IGNORECASE
)


def resolve_date_range(
    preset: str | None, *, reference: datetime | None = None
) -> datetime | None:
    """Return the start of the window described by ``preset``.

    ``None`` and ``"all"`` mean "no lower bound". ``today`` starts at local
    midnight, ``month`` goes back one calendar month and the remaining presets
    (or a bare number of days such as ``"14"`` or ``"14days"``) go back that many
    days from ``reference``.
    """

    if preset is None:
        return None

    value = preset.strip().lower()
    if value in ("", "all"):
        return None

    now = ensure_app_timezone(reference) or now_in_app_timezone()
    if value == "today":
        return start_of_app_day(now.date())
    if value == "month":
        return _one_month_before(now)
    if value in _PRESET_DAYS:
        return now - timedelta(days=_PRESET_DAYS[value])

    match = _CUSTOM_DAYS_PATTERN.match(value)
    if match:
        days = int(match.group("days"))
        if days <= 0:
            raise InvalidArgument("date_range must cover at least one day")
        return now - timedelta(days=days)

    raise InvalidArgument(f"Unsupported date_range '{preset}'")


def _one_month_before(value: datetime) -> datetime:
    if value.month == 1:
        year, month = value.year - 1, 12
    else:
        year, month = value.year, value.month - 1
    day = value.day
    while True:
        try:
            return value.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1


__all__ = ["resolve_date_range"]
