"""Administrative dashboards over the activity of every user."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from activity_api.application.use_cases.activity import (
    get_platform_analytics,
    get_platform_feed,
    get_platform_totals,
    get_user_activity_detail,
    get_user_sessions,
    list_user_events,
    list_user_roster,
    require_user,
)
from activity_api.domain.entities import Page, Principal
from activity_api.infrastructure.database import get_db
from activity_api.interfaces.api.dependencies import require_admin
from activity_api.interfaces.api.schemas import (
    ActivityTypeCountRead,
    DailyCountRead,
    EventPageRead,
    FeedStatsRead,
    HourlyCountRead,
    InteractionStatsRead,
    PlatformAnalyticsRead,
    PlatformFeedRead,
    PlatformTotalsRead,
    RosterRead,
    SessionReportRead,
    TopPageRead,
    UserActivityDetailRead,
    UserActivitySummaryRead,
    UserRead,
)
from activity_api.interfaces.api.schemas.activity import DevicePayload, LocationPayload
from activity_api.utils import resolve_date_range

from .activity import event_to_schema

router = APIRouter(prefix="/admin/activity", tags=["admin-activity"])


def _events_page(page: Page) -> EventPageRead:
    return EventPageRead(
        activities=[event_to_schema(event) for event in page.items],
        page=page.page,
        total=page.total,
        total_pages=page.total_pages,
    )


@router.get("/", response_model=PlatformFeedRead)
def read_platform_feed(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    date_range: str = Query("today", description="Preset such as today, week, 30days or 14d"),
    activity_type: str | None = Query(None),
    search: str | None = Query(None, description="Filter by user name or email"),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> PlatformFeedRead:
    """Return the most recent events across users with summary statistics."""

    feed = get_platform_feed(
        db,
        start=resolve_date_range(date_range),
        activity_type=activity_type,
        search=search,
        page=page,
        limit=limit,
    )
    return PlatformFeedRead(
        activities=[event_to_schema(event) for event in feed.events.items],
        page=feed.events.page,
        total_pages=feed.events.total_pages,
        stats=FeedStatsRead.model_validate(feed.stats),
    )


@router.get("/stats", response_model=PlatformTotalsRead)
def read_platform_totals(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> PlatformTotalsRead:
    return PlatformTotalsRead.model_validate(get_platform_totals(db))


@router.get("/analytics", response_model=PlatformAnalyticsRead)
def read_platform_analytics(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> PlatformAnalyticsRead:
    """Return popular pages, daily trends per type and the user leaderboard."""

    analytics = get_platform_analytics(db, start=start_date, end=end_date)
    return PlatformAnalyticsRead.model_validate(analytics)


@router.get("/users", response_model=RosterRead)
def read_user_roster(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    date_range: str = Query("all"),
    search: str | None = Query(None),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> RosterRead:
    """Return one summary row per active user, most recently seen first."""

    roster = list_user_roster(
        db,
        start=resolve_date_range(date_range),
        search=search,
        page=page,
        limit=limit,
    )
    return RosterRead(
        users=[UserActivitySummaryRead.model_validate(row) for row in roster.items],
        page=roster.page,
        total=roster.total,
        total_pages=roster.total_pages,
    )


@router.get("/users/{user_id}", response_model=UserActivityDetailRead)
def read_user_activity_detail(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(30, ge=1, le=200),
    date_range: str = Query("30days"),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> UserActivityDetailRead:
    """Return the activity dashboard of one user."""

    detail = get_user_activity_detail(
        db,
        user_id=user_id,
        start=resolve_date_range(date_range),
        page=page,
        limit=limit,
    )
    return UserActivityDetailRead(
        user=UserRead.model_validate(detail.user),
        stats=InteractionStatsRead.model_validate(detail.stats),
        activity_breakdown=[
            ActivityTypeCountRead.model_validate(row) for row in detail.activity_breakdown
        ],
        activity_by_hour=[HourlyCountRead.model_validate(row) for row in detail.activity_by_hour],
        activity_by_day=[DailyCountRead.model_validate(row) for row in detail.activity_by_day],
        top_pages=[TopPageRead.model_validate(row) for row in detail.top_pages],
        device=DevicePayload.model_validate(detail.device) if detail.device else None,
        location=LocationPayload.model_validate(detail.location) if detail.location else None,
        timeline=_events_page(detail.timeline),
    )


@router.get("/users/{user_id}/events", response_model=EventPageRead)
def read_user_events(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    date_range: str = Query("7days"),
    activity_type: str | None = Query(None),
    search: str | None = Query(None, description="Matches page path, title or action"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> EventPageRead:
    events = list_user_events(
        db,
        user_id=user_id,
        start=resolve_date_range(date_range),
        activity_type=activity_type,
        search=search,
        page=page,
        limit=limit,
        newest_first=sort_order == "desc",
    )
    return _events_page(events)


@router.get("/users/{user_id}/sessions", response_model=SessionReportRead)
def read_user_sessions(
    user_id: int,
    date_range: str = Query("7days"),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
) -> SessionReportRead:
    """Return the reconstructed sessions of one user.

    Explicit ``start_date``/``end_date`` bounds take precedence over the
    ``date_range`` preset.
    """

    require_user(db, user_id)
    if start_date is None and end_date is None:
        start_date = resolve_date_range(date_range)
    report = get_user_sessions(db, user_id=user_id, start=start_date, end=end_date)
    return SessionReportRead.model_validate(report)


__all__ = ["router"]
