"""Activity ingestion, session reconstruction and analytics use cases."""

from .analytics import (
    daily_histogram,
    daily_trends,
    engagement_summary,
    get_leaderboard,
    get_platform_analytics,
    get_platform_feed,
    get_platform_totals,
    get_user_activity_detail,
    get_user_stats,
    hourly_histogram,
    list_user_roster,
)
from .ingest import EventPublisher, ingest_batch, ingest_one, synthesize_session_id
from .queries import list_journey, list_user_events, require_user
from .sessions import get_user_sessions, reconstruct_sessions

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
    "EventPublisher",
    "ingest_batch",
    "ingest_one",
    "synthesize_session_id",
    "list_journey",
    "list_user_events",
    "require_user",
    "get_user_sessions",
    "reconstruct_sessions",
]
