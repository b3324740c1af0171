"""Best-effort fan-out of ingested activity to websocket subscribers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Set

from anyio import from_thread

from activity_api.domain.entities import ActivityEvent

from .manager import (
    ANALYTICS_CHANNEL,
    ActivitySubscriptionManager,
    user_activity_channel,
)

logger = logging.getLogger(__name__)

USER_ACTIVITY_MESSAGE = "user-activity-update"
ANALYTICS_MESSAGE = "analytics-update"


class ActivityPublisher:
    """Serialize activity events and schedule their delivery.

    ``publish`` only schedules work on the event loop and returns
    immediately; it never raises. Delivery is at-most-once to the
    subscribers connected at the time the message is sent.
    """

    def __init__(self, manager: ActivitySubscriptionManager) -> None:
        self._manager = manager
        self._pending: Set[asyncio.Task] = set()

    def publish(self, user_id: int, event: ActivityEvent) -> None:
        """Fan ``event`` out to the user channel and the analytics channel."""

        try:
            self._schedule(
                user_activity_channel(user_id),
                {"type": USER_ACTIVITY_MESSAGE, "data": serialize_activity_event(event)},
            )
            self._schedule(
                ANALYTICS_CHANNEL,
                {"type": ANALYTICS_MESSAGE, "data": summarize_activity_event(event)},
            )
        except Exception:
            logger.warning(
                "Could not publish activity %s for user %s", event.id, user_id, exc_info=True
            )

    def _schedule(self, channel: str, message: dict[str, Any]) -> None:
        if not self._manager.subscribers(channel):
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Called from a worker thread: hop onto the loop only to create the task.
            from_thread.run_sync(self._spawn, channel, message)
        else:
            self._spawn(channel, message)

    def _spawn(self, channel: str, message: dict[str, Any]) -> None:
        task = asyncio.get_running_loop().create_task(
            self._manager.broadcast(channel, message)
        )
        self._pending.add(task)
        task.add_done_callback(self._on_delivery_done)

    def _on_delivery_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Activity delivery failed: %s", exc)


def serialize_activity_event(event: ActivityEvent) -> dict[str, Any]:
    """Return the JSON payload pushed to subscribers of one user's activity."""

    payload = asdict(event)
    payload.pop("session_id_supplied", None)
    _normalize_datetime_values(payload)
    return payload


def summarize_activity_event(event: ActivityEvent) -> dict[str, Any]:
    """Return the reduced payload pushed on the platform analytics channel."""

    return {
        "user_id": event.user_id,
        "activity_type": event.activity_type,
        "timestamp": event.timestamp.isoformat(),
    }


def _normalize_datetime_values(data: dict[str, object] | list[object]) -> None:
    """Convert ``datetime`` instances nested inside ``data`` into ISO strings."""

    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
            elif isinstance(value, (dict, list)):
                _normalize_datetime_values(value)
    elif isinstance(data, list):
        for index, item in enumerate(data):
            if isinstance(item, datetime):
                data[index] = item.isoformat()
            elif isinstance(item, (dict, list)):
                _normalize_datetime_values(item)


__all__ = [
    "ActivityPublisher",
    "ANALYTICS_MESSAGE",
    "USER_ACTIVITY_MESSAGE",
    "serialize_activity_event",
    "summarize_activity_event",
]
