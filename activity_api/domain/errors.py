"""Error taxonomy shared by ingestion and query use cases."""

from __future__ import annotations


class ActivityError(Exception):
    """Base class for failures surfaced to API callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(ActivityError):
    """Raised when a call carries no usable principal."""


class Forbidden(ActivityError):
    """Raised when the principal lacks the role required by the call."""


class InvalidArgument(ActivityError, ValueError):
    """Raised for missing fields, unknown activity types or malformed batches."""


class NotFound(ActivityError, ValueError):
    """Raised when a query targets a user that does not exist."""


class Unavailable(ActivityError):
    """Raised when the event store cannot be reached."""


__all__ = [
    "ActivityError",
    "Unauthorized",
    "Forbidden",
    "InvalidArgument",
    "NotFound",
    "Unavailable",
]
