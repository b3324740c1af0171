"""Read-only projections produced by the aggregation use cases."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from .activity_event import DeviceInfo, LocationInfo
from .user import User


@dataclass
class ActivityTypeCount:
    activity_type: str
    count: int


@dataclass
class HourlyCount:
    hour: int
    count: int


@dataclass
class DailyCount:
    day: date
    count: int


@dataclass
class DailyTypeCount:
    day: date
    activity_type: str
    count: int


@dataclass
class TopPage:
    path: str | None
    title: str | None
    count: int
    avg_duration: float | None


@dataclass
class EngagementDay:
    """Per-day engagement rollup for a single user."""

    day: date
    distinct_session_count: int
    page_view_count: int
    mean_duration_seconds: float


@dataclass
class UserActivitySummary:
    """One row per user: used by the roster and the leaderboard."""

    user_id: int
    name: str | None
    email: str | None
    role: str | None
    total_activities: int
    session_count: int
    first_seen: datetime | None = None
    last_seen: datetime | None = None
    page_views: int = 0
    logins: int = 0
    scrolls: int = 0
    clicks: int = 0
    total_duration: float = 0.0
    activity_types: list[str] = field(default_factory=list)


@dataclass
class InteractionStats:
    total_activities: int = 0
    session_count: int = 0
    total_page_views: int = 0
    total_logins: int = 0
    total_scrolls: int = 0
    total_clicks: int = 0
    total_duration: float = 0.0
    avg_duration: float = 0.0


@dataclass
class Page:
    """Slice of a paginated listing."""

    items: list
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return -(-self.total // self.limit)


@dataclass
class UserStats:
    total_activities: int
    total_sessions: int
    activity_breakdown: list[ActivityTypeCount]
    engagement: list[EngagementDay]
    top_pages: list[TopPage]


@dataclass
class UserActivityDetail:
    user: User
    stats: InteractionStats
    activity_breakdown: list[ActivityTypeCount]
    activity_by_hour: list[HourlyCount]
    activity_by_day: list[DailyCount]
    top_pages: list[TopPage]
    device: DeviceInfo | None
    location: LocationInfo | None
    timeline: Page


@dataclass
class FeedStats:
    total_activities: int
    unique_users: int
    avg_duration: float
    top_actions: list[ActivityTypeCount]


@dataclass
class PlatformFeed:
    events: Page
    stats: FeedStats


@dataclass
class PlatformAnalytics:
    popular_pages: list[TopPage]
    activity_trends: list[DailyTypeCount]
    top_users: list[UserActivitySummary]


@dataclass
class PlatformTotals:
    total_activities: int
    unique_users: int


__all__ = [
    "ActivityTypeCount",
    "HourlyCount",
    "DailyCount",
    "DailyTypeCount",
    "TopPage",
    "EngagementDay",
    "UserActivitySummary",
    "InteractionStats",
    "Page",
    "UserStats",
    "UserActivityDetail",
    "FeedStats",
    "PlatformFeed",
    "PlatformAnalytics",
    "PlatformTotals",
]
