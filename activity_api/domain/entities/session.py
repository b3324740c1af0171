"""Derived usage session reconstructed from a user's events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ActivitySession:
    """A run of events bounded by inactivity or a change of session id.

    Sessions are never persisted; they are recomputed from the event slice
    they describe.
    """

    session_key: str
    start_time: datetime
    end_time: datetime
    last_activity_time: datetime
    duration_seconds: float = 0.0
    activity_count: int = 0
    activity_types: list[str] = field(default_factory=list)
    event_ids: list[int | None] = field(default_factory=list)


@dataclass
class SessionReport:
    sessions: list[ActivitySession]
    total_sessions: int
    total_duration_seconds: float


__all__ = ["ActivitySession", "SessionReport"]
