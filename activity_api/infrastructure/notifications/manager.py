"""Subscription registry for realtime activity websockets."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, DefaultDict, Protocol, Set

logger = logging.getLogger(__name__)

ANALYTICS_CHANNEL = "analytics"
_USER_CHANNEL_PREFIX = "user-activity:"


def user_activity_channel(user_id: int) -> str:
    """Return the channel name carrying the activity of ``user_id``."""

    return f"{_USER_CHANNEL_PREFIX}{user_id}"


class Subscriber(Protocol):
    """Anything able to receive a JSON message, typically a ``WebSocket``."""

    async def send_json(self, data: Any) -> None: ...


class ActivitySubscriptionManager:
    """Track which subscribers listen to which channel.

    Mutations take a lock; deliveries work on a snapshot so a slow subscriber
    never blocks ``subscribe``/``unsubscribe`` calls or other publishes.
    Nothing is persisted: a restarted process starts with no subscribers.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._channels: DefaultDict[str, Set[Subscriber]] = defaultdict(set)

    def subscribe(self, channel: str, subscriber: Subscriber) -> None:
        with self._lock:
            self._channels[channel].add(subscriber)

    def unsubscribe(self, channel: str, subscriber: Subscriber) -> None:
        with self._lock:
            subscribers = self._channels.get(channel)
            if subscribers is None:
                return
            subscribers.discard(subscriber)
            if not subscribers:
                self._channels.pop(channel, None)

    def unsubscribe_all(self, subscriber: Subscriber) -> None:
        """Remove ``subscriber`` from every channel, e.g. after a disconnect."""

        with self._lock:
            for channel in list(self._channels):
                subscribers = self._channels[channel]
                subscribers.discard(subscriber)
                if not subscribers:
                    self._channels.pop(channel, None)

    def subscribers(self, channel: str) -> list[Subscriber]:
        with self._lock:
            return list(self._channels.get(channel, ()))

    def channels(self) -> list[str]:
        with self._lock:
            return sorted(self._channels)

    def reset(self) -> None:
        """Forget every subscriber."""

        with self._lock:
            self._channels.clear()

    async def broadcast(self, channel: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every current subscriber of ``channel``.

        Returns the number of successful deliveries. Subscribers whose send
        fails are dropped from the registry.
        """

        delivered = 0
        for subscriber in self.subscribers(channel):
            try:
                await subscriber.send_json(message)
            except Exception:
                logger.warning(
                    "Dropping subscriber on channel %s after a failed delivery",
                    channel,
                    exc_info=True,
                )
                self.unsubscribe_all(subscriber)
            else:
                delivered += 1
        return delivered


__all__ = [
    "ANALYTICS_CHANNEL",
    "ActivitySubscriptionManager",
    "Subscriber",
    "user_activity_channel",
]
