"""Use cases that validate and persist tracked activity."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime
from typing import Final, Protocol

from sqlalchemy.orm import Session

from activity_api.config import Settings, get_settings
from activity_api.domain.entities import (
    ACTIVITY_TYPES,
    ActionInfo,
    ActivityDraft,
    ActivityEvent,
    Principal,
)
from activity_api.domain.errors import InvalidArgument, Unauthorized
from activity_api.infrastructure.repositories import ActivityEventRepository
from activity_api.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)

MAX_METADATA_KEY_LENGTH: Final[int] = 64
MAX_METADATA_STRING_LENGTH: Final[int] = 1024
_METADATA_SCALARS: Final[tuple[type, ...]] = (str, int, float, bool)


class EventPublisher(Protocol):
    """Receiver of successfully stored events."""

    def publish(self, user_id: int, event: ActivityEvent) -> None: ...


def ingest_one(
    session: Session,
    *,
    principal: Principal | None,
    draft: ActivityDraft,
    publisher: EventPublisher | None = None,
    settings: Settings | None = None,
) -> ActivityEvent:
    """Validate ``draft``, store it for ``principal`` and fan it out.

    Single events are always stamped with the server time; a timestamp on the
    draft is ignored.
    """

    settings = settings or get_settings()
    user_id = _require_user(principal)
    now = now_in_app_timezone()
    event = _build_event(user_id, draft, timestamp=now, settings=settings)

    stored = ActivityEventRepository(session).add(event)
    logger.debug(
        "Stored %s activity %s for user %s", stored.activity_type, stored.id, user_id
    )
    _notify(publisher, user_id, [stored])
    return stored


def ingest_batch(
    session: Session,
    *,
    principal: Principal | None,
    drafts: Sequence[ActivityDraft],
    publisher: EventPublisher | None = None,
    settings: Settings | None = None,
) -> int:
    """Store every draft in ``drafts`` or none of them.

    All items are validated before anything is written. Items without a
    timestamp share the time at which the batch was received, so the batch
    keeps its submission order for equal timestamps.
    """

    settings = settings or get_settings()
    user_id = _require_user(principal)
    if not isinstance(drafts, (list, tuple)):
        raise InvalidArgument("Activities array is required")
    if len(drafts) > settings.max_batch_size:
        raise InvalidArgument(
            f"A batch may contain at most {settings.max_batch_size} activities"
        )

    received_at = now_in_app_timezone()
    events: list[ActivityEvent] = []
    for index, draft in enumerate(drafts):
        timestamp = ensure_app_timezone(draft.timestamp) or received_at
        try:
            events.append(
                _build_event(user_id, draft, timestamp=timestamp, settings=settings)
            )
        except InvalidArgument as exc:
            raise InvalidArgument(f"activities[{index}]: {exc.message}") from exc

    stored = ActivityEventRepository(session).add_many(events)
    logger.debug("Stored batch of %d activities for user %s", len(stored), user_id)
    _notify(publisher, user_id, stored)
    return len(stored)


def synthesize_session_id(user_id: int, moment: datetime) -> str:
    """Return a fallback session id unique per user, instant and device."""

    epoch_ms = int(moment.timestamp() * 1000)
    return f"session_{user_id}_{epoch_ms}_{secrets.token_hex(4)}"


def _require_user(principal: Principal | None) -> int:
    if principal is None or principal.user_id is None:
        raise Unauthorized("Unauthorized")
    return principal.user_id


def _build_event(
    user_id: int,
    draft: ActivityDraft,
    *,
    timestamp: datetime,
    settings: Settings,
) -> ActivityEvent:
    if not draft.activity_type:
        raise InvalidArgument("activity_type is required")
    if draft.activity_type not in ACTIVITY_TYPES:
        raise InvalidArgument(f"Unknown activity_type '{draft.activity_type}'")
    if draft.duration is not None and draft.duration < 0:
        raise InvalidArgument("duration must be a non-negative number of milliseconds")
    action = _validate_action(draft.action, settings)

    session_id = (draft.session_id or "").strip()
    supplied = bool(session_id)
    if not supplied:
        session_id = synthesize_session_id(user_id, timestamp)

    return ActivityEvent(
        id=None,
        user_id=user_id,
        session_id=session_id,
        session_id_supplied=supplied,
        activity_type=draft.activity_type,
        timestamp=timestamp,
        page=draft.page,
        action=action,
        scroll=draft.scroll,
        course=draft.course,
        device=draft.device,
        location=draft.location,
        duration=draft.duration,
    )


def _validate_action(action: ActionInfo | None, settings: Settings) -> ActionInfo | None:
    if action is None:
        return None
    metadata = action.metadata or {}
    if len(metadata) > settings.max_metadata_entries:
        raise InvalidArgument(
            f"action.metadata may hold at most {settings.max_metadata_entries} entries"
        )
    for key, value in metadata.items():
        if not isinstance(key, str) or not key or len(key) > MAX_METADATA_KEY_LENGTH:
            raise InvalidArgument(
                f"action.metadata keys must be strings of 1-{MAX_METADATA_KEY_LENGTH} characters"
            )
        if value is not None and not isinstance(value, _METADATA_SCALARS):
            raise InvalidArgument(f"action.metadata['{key}'] must be a scalar value")
        if isinstance(value, str) and len(value) > MAX_METADATA_STRING_LENGTH:
            raise InvalidArgument(
                f"action.metadata['{key}'] exceeds {MAX_METADATA_STRING_LENGTH} characters"
            )
    return replace(action, metadata=dict(metadata))


def _notify(
    publisher: EventPublisher | None, user_id: int, events: Sequence[ActivityEvent]
) -> None:
    if publisher is None:
        return
    for event in events:
        try:
            publisher.publish(user_id, event)
        except Exception:
            logger.warning(
                "Fan-out failed for activity %s of user %s", event.id, user_id, exc_info=True
            )


__all__ = ["EventPublisher", "ingest_batch", "ingest_one", "synthesize_session_id"]
