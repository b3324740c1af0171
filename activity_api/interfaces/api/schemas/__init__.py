from .activity import (
    ActivityBatchItem,
    ActivityBatchRequest,
    ActivityBatchResponse,
    ActivityEventRead,
    ActivityTrackRequest,
    ActivityTypeCountRead,
    DailyCountRead,
    DailyTypeCountRead,
    EngagementDayRead,
    EventPageRead,
    FeedStatsRead,
    HourlyCountRead,
    InteractionStatsRead,
    JourneyRead,
    PlatformAnalyticsRead,
    PlatformFeedRead,
    PlatformTotalsRead,
    RosterRead,
    SessionRead,
    SessionReportRead,
    TopPageRead,
    UserActivityDetailRead,
    UserActivitySummaryRead,
    UserRead,
    UserStatsRead,
)

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
