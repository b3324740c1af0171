"""Filter shared by event listings and every aggregation over them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(frozen=True)
class ActivityFilter:
    """Selection criteria for a set of activity events.

    Listings and aggregations that answer the same query must be computed from
    the same ``ActivityFilter`` instance.
    """

    user_id: int | None = None
    start: datetime | None = None
    end: datetime | None = None
    activity_type: str | None = None
    search: str | None = None
    user_search: str | None = None

    def with_start(self, start: datetime | None) -> "ActivityFilter":
        return replace(self, start=start)


__all__ = ["ActivityFilter"]
