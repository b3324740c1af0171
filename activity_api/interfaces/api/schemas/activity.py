"""Pydantic schemas for activity tracking and analytics endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from activity_api.domain.entities import (
    ActionInfo,
    ActivityDraft,
    CourseInfo,
    DeviceInfo,
    LocationInfo,
    PageInfo,
    ScrollInfo,
)

MetadataValue = Union[str, int, float, bool, None]


class ReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# -- request bodies ---------------------------------------------------------


class PagePayload(ReadModel):
    path: str | None = Field(None, max_length=512)
    title: str | None = Field(None, max_length=255)
    referrer: str | None = Field(None, max_length=512)


class ActionPayload(ReadModel):
    element: str | None = Field(None, max_length=255)
    value: str | None = None
    metadata: dict[str, MetadataValue] = Field(
        default_factory=dict,
        description="Open key/value data; scalar values only, size capped by the server",
    )


class ScrollPayload(ReadModel):
    depth: float | None = None
    max_depth: float | None = None


class CoursePayload(ReadModel):
    course_id: str | None = Field(None, max_length=120)
    course_name: str | None = Field(None, max_length=255)
    section: str | None = Field(None, max_length=255)
    progress: float | None = None


class DevicePayload(ReadModel):
    user_agent: str | None = Field(None, max_length=512)
    platform: str | None = Field(None, max_length=120)
    is_mobile: bool | None = None
    screen_width: int | None = None
    screen_height: int | None = None


class LocationPayload(ReadModel):
    ip: str | None = Field(None, max_length=64)
    country: str | None = Field(None, max_length=120)
    city: str | None = Field(None, max_length=120)


class ActivityTrackRequest(BaseModel):
    activity_type: str = Field(..., description="One of the supported activity types")
    session_id: str | None = Field(
        None, max_length=120, description="Client correlation token, optional"
    )
    page: PagePayload | None = None
    action: ActionPayload | None = None
    scroll: ScrollPayload | None = None
    course: CoursePayload | None = None
    device: DevicePayload | None = None
    location: LocationPayload | None = None
    duration: float | None = Field(None, description="Engagement time in milliseconds")

    def to_draft(
        self,
        *,
        user_agent: str | None = None,
        client_ip: str | None = None,
        timestamp: datetime | None = None,
    ) -> ActivityDraft:
        """Return the domain draft, filling device/location from the request."""

        device = self.device or DevicePayload()
        location = self.location or LocationPayload()
        return ActivityDraft(
            activity_type=self.activity_type,
            session_id=self.session_id,
            page=PageInfo(**self.page.model_dump()) if self.page else None,
            action=ActionInfo(**self.action.model_dump()) if self.action else None,
            scroll=ScrollInfo(**self.scroll.model_dump()) if self.scroll else None,
            course=CourseInfo(**self.course.model_dump()) if self.course else None,
            device=DeviceInfo(
                **{**device.model_dump(), "user_agent": device.user_agent or user_agent}
            ),
            location=LocationInfo(**{**location.model_dump(), "ip": location.ip or client_ip}),
            duration=self.duration,
            timestamp=timestamp,
        )


class ActivityBatchItem(ActivityTrackRequest):
    timestamp: datetime | None = Field(
        None, description="When the interaction happened; defaults to batch receipt time"
    )


class ActivityBatchRequest(BaseModel):
    activities: list[ActivityBatchItem]


class ActivityBatchResponse(BaseModel):
    count: int


# -- responses --------------------------------------------------------------


class ActivityEventRead(ReadModel):
    id: int
    user_id: int
    session_id: str
    activity_type: str
    timestamp: datetime
    page: PagePayload | None = None
    action: ActionPayload | None = None
    scroll: ScrollPayload | None = None
    course: CoursePayload | None = None
    device: DevicePayload | None = None
    location: LocationPayload | None = None
    duration: float | None = None


class JourneyRead(BaseModel):
    data: list[ActivityEventRead]
    count: int


class ActivityTypeCountRead(ReadModel):
    activity_type: str
    count: int


class HourlyCountRead(ReadModel):
    hour: int
    count: int


class DailyCountRead(ReadModel):
    day: date
    count: int


class DailyTypeCountRead(ReadModel):
    day: date
    activity_type: str
    count: int


class TopPageRead(ReadModel):
    path: str | None
    title: str | None
    count: int
    avg_duration: float | None


class EngagementDayRead(ReadModel):
    day: date
    distinct_session_count: int
    page_view_count: int
    mean_duration_seconds: float


class UserStatsRead(ReadModel):
    total_activities: int
    total_sessions: int
    activity_breakdown: list[ActivityTypeCountRead]
    engagement: list[EngagementDayRead]
    top_pages: list[TopPageRead]


class SessionRead(ReadModel):
    session_key: str
    start_time: datetime
    end_time: datetime
    duration_seconds: float
    activity_count: int
    activity_types: list[str]
    event_ids: list[int | None]


class SessionReportRead(ReadModel):
    sessions: list[SessionRead]
    total_sessions: int
    total_duration_seconds: float


class UserActivitySummaryRead(ReadModel):
    user_id: int
    name: str | None
    email: str | None
    role: str | None
    total_activities: int
    session_count: int
    first_seen: datetime | None
    last_seen: datetime | None
    page_views: int
    logins: int
    scrolls: int
    clicks: int
    total_duration: float
    activity_types: list[str]


class RosterRead(BaseModel):
    users: list[UserActivitySummaryRead]
    page: int
    total: int
    total_pages: int


class UserRead(ReadModel):
    id: int
    name: str
    email: str
    role: str
    created_at: datetime | None = None


class InteractionStatsRead(ReadModel):
    total_activities: int
    session_count: int
    total_page_views: int
    total_logins: int
    total_scrolls: int
    total_clicks: int
    total_duration: float
    avg_duration: float


class EventPageRead(BaseModel):
    activities: list[ActivityEventRead]
    page: int
    total: int
    total_pages: int


class UserActivityDetailRead(BaseModel):
    user: UserRead
    stats: InteractionStatsRead
    activity_breakdown: list[ActivityTypeCountRead]
    activity_by_hour: list[HourlyCountRead]
    activity_by_day: list[DailyCountRead]
    top_pages: list[TopPageRead]
    device: DevicePayload | None
    location: LocationPayload | None
    timeline: EventPageRead


class FeedStatsRead(ReadModel):
    total_activities: int
    unique_users: int
    avg_duration: float
    top_actions: list[ActivityTypeCountRead]


class PlatformFeedRead(BaseModel):
    activities: list[ActivityEventRead]
    page: int
    total_pages: int
    stats: FeedStatsRead


class PlatformAnalyticsRead(ReadModel):
    popular_pages: list[TopPageRead]
    activity_trends: list[DailyTypeCountRead]
    top_users: list[UserActivitySummaryRead]


class PlatformTotalsRead(ReadModel):
    total_activities: int
    unique_users: int


__all__ = [
    "ActivityBatchItem",
    "ActivityBatchRequest",
    "ActivityBatchResponse",
    "ActivityEventRead",
    "ActivityTrackRequest",
    "ActivityTypeCountRead",
    "DailyCountRead",
    "DailyTypeCountRead",
    "EngagementDayRead",
    "EventPageRead",
    "FeedStatsRead",
    "HourlyCountRead",
    "InteractionStatsRead",
    "JourneyRead",
    "PlatformAnalyticsRead",
    "PlatformFeedRead",
    "PlatformTotalsRead",
    "RosterRead",
    "SessionRead",
    "SessionReportRead",
    "TopPageRead",
    "UserActivityDetailRead",
    "UserActivitySummaryRead",
    "UserRead",
    "UserStatsRead",
]
