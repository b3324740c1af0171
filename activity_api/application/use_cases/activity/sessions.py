"""Reconstruction of usage sessions from a user's activity events."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Final

from sqlalchemy.orm import Session

from activity_api.config import get_settings
from activity_api.domain.entities import (
    ActivityEvent,
    ActivityFilter,
    ActivitySession,
    SessionReport,
)
from activity_api.infrastructure.repositories import ActivityEventRepository

DEFAULT_INACTIVITY_TIMEOUT: Final[timedelta] = timedelta(minutes=30)


def reconstruct_sessions(
    events: Iterable[ActivityEvent],
    *,
    inactivity_timeout: timedelta = DEFAULT_INACTIVITY_TIMEOUT,
) -> list[ActivitySession]:
    """Partition ``events`` into sessions.

    Events are ordered by ``timestamp`` with the store id as tie breaker. A new
    session starts on the first event, after a gap strictly longer than
    ``inactivity_timeout`` or when an event carries a client session id that
    differs from the current session's. The result only depends on the set of
    events passed in.
    """

    ordered = sorted(events, key=_chronological_key)
    taken_keys = {
        event.client_session_id
        for event in ordered
        if event.client_session_id is not None
    }
    sessions: list[ActivitySession] = []
    current: ActivitySession | None = None

    for event in ordered:
        explicit_id = event.client_session_id
        if (
            current is None
            or event.timestamp - current.last_activity_time > inactivity_timeout
            or (explicit_id is not None and explicit_id != current.session_key)
        ):
            if current is not None:
                sessions.append(current)
            current = ActivitySession(
                session_key=explicit_id
                or _generated_key(len(sessions) + 1, taken_keys),
                start_time=event.timestamp,
                end_time=event.timestamp,
                last_activity_time=event.timestamp,
                duration_seconds=0.0,
                activity_count=1,
                activity_types=[event.activity_type],
                event_ids=[event.id],
            )
            continue

        current.last_activity_time = event.timestamp
        current.end_time = event.timestamp
        current.duration_seconds = (
            current.end_time - current.start_time
        ).total_seconds()
        current.activity_count += 1
        current.activity_types.append(event.activity_type)
        current.event_ids.append(event.id)

    if current is not None:
        sessions.append(current)
    return sessions


def get_user_sessions(
    session: Session,
    *,
    user_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    inactivity_timeout: timedelta | None = None,
) -> SessionReport:
    """Reconstruct the sessions of ``user_id`` between ``start`` and ``end``.

    Unknown users simply have no events and yield an empty report.
    """

    if inactivity_timeout is None:
        inactivity_timeout = timedelta(minutes=get_settings().session_inactivity_minutes)

    events = ActivityEventRepository(session).list_chronological(
        ActivityFilter(user_id=user_id, start=start, end=end)
    )
    sessions = reconstruct_sessions(events, inactivity_timeout=inactivity_timeout)
    return SessionReport(
        sessions=sessions,
        total_sessions=len(sessions),
        total_duration_seconds=sum(item.duration_seconds for item in sessions),
    )


def _generated_key(number: int, taken_keys: set[str]) -> str:
    """Return the first free ``session-<n>`` label, starting at ``number``."""

    while f"session-{number}" in taken_keys:
        number += 1
    key = f"session-{number}"
    taken_keys.add(key)
    return key


def _chronological_key(event: ActivityEvent) -> tuple[datetime, int]:
    return (event.timestamp, event.id if event.id is not None else -1)


__all__ = ["DEFAULT_INACTIVITY_TIMEOUT", "get_user_sessions", "reconstruct_sessions"]
