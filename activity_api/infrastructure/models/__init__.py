"""ORM models used by the application infrastructure."""

from .activity_event import ActivityEventModel
from .user import UserModel

__all__ = [
    "ActivityEventModel",
    "UserModel",
]
