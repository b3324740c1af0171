"""Repository implementations for infrastructure layer."""

from .activity_event_repository import ActivityEventRepository
from .user_repository import UserRepository

__all__ = [
    "ActivityEventRepository",
    "UserRepository",
]
