"""Use cases returning raw activity listings."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from activity_api.domain.entities import (
    ACTIVITY_TYPES,
    ActivityEvent,
    ActivityFilter,
    Page,
    User,
)
from activity_api.domain.errors import InvalidArgument, NotFound
from activity_api.infrastructure.repositories import (
    ActivityEventRepository,
    UserRepository,
)


def require_user(session: Session, user_id: int) -> User:
    """Return the directory user ``user_id`` or raise :class:`NotFound`."""

    user = UserRepository(session).get(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def validate_activity_type(activity_type: str | None) -> str | None:
    """Normalize an ``activity_type`` query filter; ``"all"`` disables it."""

    if activity_type is None or activity_type in ("", "all"):
        return None
    if activity_type not in ACTIVITY_TYPES:
        raise InvalidArgument(f"Unknown activity_type '{activity_type}'")
    return activity_type


def offset_for(page: int, limit: int) -> int:
    if page < 1 or limit < 1:
        raise InvalidArgument("page and limit must be positive integers")
    return (page - 1) * limit


def list_journey(
    session: Session,
    *,
    user_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    activity_type: str | None = None,
    limit: int = 100,
) -> list[ActivityEvent]:
    """Return the caller's own events, newest first."""

    flt = ActivityFilter(
        user_id=user_id,
        start=start,
        end=end,
        activity_type=validate_activity_type(activity_type),
    )
    return ActivityEventRepository(session).list(flt, limit=limit)


def list_user_events(
    session: Session,
    *,
    user_id: int,
    start: datetime | None = None,
    activity_type: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
    newest_first: bool = True,
) -> Page:
    """Return a page of one user's events with free-text filtering."""

    require_user(session, user_id)
    offset = offset_for(page, limit)
    flt = ActivityFilter(
        user_id=user_id,
        start=start,
        activity_type=validate_activity_type(activity_type),
        search=search,
    )
    repository = ActivityEventRepository(session)
    events = repository.list(flt, offset=offset, limit=limit, newest_first=newest_first)
    return Page(items=events, page=page, limit=limit, total=repository.count(flt))


__all__ = [
    "list_journey",
    "list_user_events",
    "offset_for",
    "require_user",
    "validate_activity_type",
]
