"""Domain entity representing a user known to the identity directory."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """Read-only view of a directory user."""

    id: int
    name: str
    email: str
    role: str
    created_at: datetime | None = None


__all__ = ["User"]
