"""Domain entities exposed by the application."""

from .activity_event import (
    ACTIVITY_TYPES,
    BUTTON_CLICK,
    LOGIN,
    PAGE_VIEW,
    SCROLL,
    ActionInfo,
    ActivityDraft,
    ActivityEvent,
    CourseInfo,
    DeviceInfo,
    LocationInfo,
    MetadataValue,
    PageInfo,
    ScrollInfo,
)
from .activity_filter import ActivityFilter
from .analytics import (
    ActivityTypeCount,
    DailyCount,
    DailyTypeCount,
    EngagementDay,
    FeedStats,
    HourlyCount,
    InteractionStats,
    Page,
    PlatformAnalytics,
    PlatformFeed,
    PlatformTotals,
    TopPage,
    UserActivityDetail,
    UserActivitySummary,
    UserStats,
)
from .principal import ADMIN_ROLES, Principal
from .session import ActivitySession, SessionReport
from .user import User

__all__ = [
    "ACTIVITY_TYPES",
    "BUTTON_CLICK",
    "LOGIN",
    "PAGE_VIEW",
    "SCROLL",
    "ActionInfo",
    "ActivityDraft",
    "ActivityEvent",
    "CourseInfo",
    "DeviceInfo",
    "LocationInfo",
    "MetadataValue",
    "PageInfo",
    "ScrollInfo",
    "ActivityFilter",
    "ActivityTypeCount",
    "DailyCount",
    "DailyTypeCount",
    "EngagementDay",
    "FeedStats",
    "HourlyCount",
    "InteractionStats",
    "Page",
    "PlatformAnalytics",
    "PlatformFeed",
    "PlatformTotals",
    "TopPage",
    "UserActivityDetail",
    "UserActivitySummary",
    "UserStats",
    "ADMIN_ROLES",
    "Principal",
    "ActivitySession",
    "SessionReport",
    "User",
]
