"""Realtime activity fan-out for the infrastructure layer."""

from .manager import (
    ANALYTICS_CHANNEL,
    ActivitySubscriptionManager,
    Subscriber,
    user_activity_channel,
)
from .publisher import (
    ANALYTICS_MESSAGE,
    USER_ACTIVITY_MESSAGE,
    ActivityPublisher,
    serialize_activity_event,
    summarize_activity_event,
)

__all__ = [
    "ANALYTICS_CHANNEL",
    "ActivitySubscriptionManager",
    "Subscriber",
    "user_activity_channel",
    "ANALYTICS_MESSAGE",
    "USER_ACTIVITY_MESSAGE",
    "ActivityPublisher",
    "serialize_activity_event",
    "summarize_activity_event",
]
