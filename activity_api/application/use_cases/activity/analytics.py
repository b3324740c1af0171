"""Aggregations over filtered activity for dashboards."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from activity_api.config import get_settings
from activity_api.domain.entities import (
    PAGE_VIEW,
    ActivityEvent,
    ActivityFilter,
    DailyCount,
    DailyTypeCount,
    EngagementDay,
    FeedStats,
    HourlyCount,
    Page,
    PlatformAnalytics,
    PlatformFeed,
    PlatformTotals,
    UserActivityDetail,
    UserActivitySummary,
    UserStats,
)
from activity_api.infrastructure.repositories import ActivityEventRepository
from activity_api.utils import ensure_app_timezone, now_in_app_timezone

from .queries import offset_for, require_user, validate_activity_type

DEFAULT_TOP_PAGES_LIMIT = 10
POPULAR_PAGES_LIMIT = 20
LEADERBOARD_LIMIT = 20
FEED_TOP_ACTIONS_LIMIT = 5


# -- pure projections -------------------------------------------------------


def hourly_histogram(events: Iterable[ActivityEvent]) -> list[HourlyCount]:
    """Count events per hour of day (0-23) in the application timezone."""

    counts = Counter(_local(event.timestamp).hour for event in events)
    return [HourlyCount(hour=hour, count=counts[hour]) for hour in sorted(counts)]


def daily_histogram(events: Iterable[ActivityEvent]) -> list[DailyCount]:
    """Count events per calendar day, oldest day first."""

    counts = Counter(_local(event.timestamp).date() for event in events)
    return [DailyCount(day=day, count=counts[day]) for day in sorted(counts)]


def daily_trends(events: Iterable[ActivityEvent]) -> list[DailyTypeCount]:
    """Count events per calendar day and activity type."""

    counts = Counter(
        (_local(event.timestamp).date(), event.activity_type) for event in events
    )
    return [
        DailyTypeCount(day=day, activity_type=activity_type, count=counts[(day, activity_type)])
        for day, activity_type in sorted(counts)
    ]


def engagement_summary(events: Iterable[ActivityEvent]) -> list[EngagementDay]:
    """Roll a user's events up per day.

    Sessions are the distinct client-supplied session ids of the day; the mean
    duration is the page-view duration per page view, in seconds, and ``0``
    on days without page views.
    """

    sessions: dict[date, set[str]] = defaultdict(set)
    page_views: Counter[date] = Counter()
    durations: defaultdict[date, float] = defaultdict(float)
    days: set[date] = set()

    for event in events:
        day = _local(event.timestamp).date()
        days.add(day)
        if event.client_session_id is not None:
            sessions[day].add(event.client_session_id)
        if event.activity_type == PAGE_VIEW:
            page_views[day] += 1
            durations[day] += event.duration or 0.0

    summary: list[EngagementDay] = []
    for day in sorted(days):
        views = page_views[day]
        mean_seconds = round(durations[day] / views / 1000, 2) if views else 0.0
        summary.append(
            EngagementDay(
                day=day,
                distinct_session_count=len(sessions.get(day, ())),
                page_view_count=views,
                mean_duration_seconds=mean_seconds,
            )
        )
    return summary


# -- use cases --------------------------------------------------------------


def get_user_stats(
    session: Session,
    *,
    user_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    top_pages_limit: int = DEFAULT_TOP_PAGES_LIMIT,
    reference: datetime | None = None,
) -> UserStats:
    """Return the breakdown, engagement and top pages shown on "my stats".

    Totals, breakdown and top pages cover exactly the events the journey
    listing returns for the same bounds. The engagement rollup is further
    restricted to the trailing engagement window.
    """

    flt = ActivityFilter(user_id=user_id, start=start, end=end)
    repository = ActivityEventRepository(session)

    now = ensure_app_timezone(reference) or now_in_app_timezone()
    window_start = now - timedelta(days=get_settings().engagement_window_days)
    if start is not None and ensure_app_timezone(start) > window_start:
        window_start = start
    engagement_events = repository.list_chronological(flt.with_start(window_start))

    return UserStats(
        total_activities=repository.count(flt),
        total_sessions=repository.count_distinct_client_sessions(flt),
        activity_breakdown=repository.count_by_activity_type(flt),
        engagement=engagement_summary(engagement_events),
        top_pages=repository.top_pages(flt, limit=top_pages_limit),
    )


def get_user_activity_detail(
    session: Session,
    *,
    user_id: int,
    start: datetime | None = None,
    page: int = 1,
    limit: int = 30,
) -> UserActivityDetail:
    """Return the full dashboard for one user.

    Every projection and the paginated timeline are computed from the same
    filter.
    """

    user = require_user(session, user_id)
    offset = offset_for(page, limit)
    flt = ActivityFilter(user_id=user_id, start=start)
    repository = ActivityEventRepository(session)

    events = repository.list_chronological(flt)
    latest = events[-1] if events else None
    timeline = Page(
        items=repository.list(flt, offset=offset, limit=limit),
        page=page,
        limit=limit,
        total=repository.count(flt),
    )
    return UserActivityDetail(
        user=user,
        stats=repository.interaction_stats(flt),
        activity_breakdown=repository.count_by_activity_type(flt),
        activity_by_hour=hourly_histogram(events),
        activity_by_day=daily_histogram(events),
        top_pages=repository.top_pages(flt, limit=DEFAULT_TOP_PAGES_LIMIT),
        device=latest.device if latest else None,
        location=latest.location if latest else None,
        timeline=timeline,
    )


def list_user_roster(
    session: Session,
    *,
    start: datetime | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> Page:
    """Return one aggregated row per active user, most recently seen first."""

    offset = offset_for(page, limit)
    flt = ActivityFilter(start=start, user_search=search)
    rows, total = ActivityEventRepository(session).summarize_by_user(
        flt, order_by="last_seen", offset=offset, limit=limit
    )
    return Page(items=rows, page=page, limit=limit, total=total)


def get_leaderboard(
    session: Session,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = LEADERBOARD_LIMIT,
) -> list[UserActivitySummary]:
    """Return the most active users of the platform in the given range."""

    flt = ActivityFilter(start=start, end=end)
    rows, _ = ActivityEventRepository(session).summarize_by_user(
        flt, order_by="activity_count", limit=limit
    )
    return rows


def get_platform_analytics(
    session: Session,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> PlatformAnalytics:
    flt = ActivityFilter(start=start, end=end)
    repository = ActivityEventRepository(session)
    return PlatformAnalytics(
        popular_pages=repository.top_pages(flt, limit=POPULAR_PAGES_LIMIT),
        activity_trends=daily_trends(repository.list_chronological(flt)),
        top_users=get_leaderboard(session, start=start, end=end),
    )


def get_platform_feed(
    session: Session,
    *,
    start: datetime | None = None,
    activity_type: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> PlatformFeed:
    """Return recent events across users together with feed statistics."""

    offset = offset_for(page, limit)
    flt = ActivityFilter(
        start=start,
        activity_type=validate_activity_type(activity_type),
        user_search=search,
    )
    repository = ActivityEventRepository(session)
    total = repository.count(flt)
    events = repository.list(flt, offset=offset, limit=limit)
    return PlatformFeed(
        events=Page(items=events, page=page, limit=limit, total=total),
        stats=FeedStats(
            total_activities=total,
            unique_users=repository.count_distinct_users(flt),
            avg_duration=repository.average_duration(flt),
            top_actions=repository.count_by_activity_type(
                flt, limit=FEED_TOP_ACTIONS_LIMIT
            ),
        ),
    )


def get_platform_totals(session: Session) -> PlatformTotals:
    flt = ActivityFilter()
    repository = ActivityEventRepository(session)
    return PlatformTotals(
        total_activities=repository.count(flt),
        unique_users=repository.count_distinct_users(flt),
    )


def _local(value: datetime) -> datetime:
    return ensure_app_timezone(value)  # type: ignore[return-value]


__all__ = [
    "daily_histogram",
    "daily_trends",
    "engagement_summary",
    "get_leaderboard",
    "get_platform_analytics",
    "get_platform_feed",
    "get_platform_totals",
    "get_user_activity_detail",
    "get_user_stats",
    "hourly_histogram",
    "list_user_roster",
]
