"""Aggregate application use cases."""

from .activity import get_user_sessions, ingest_batch, ingest_one

__all__ = [
    "get_user_sessions",
    "ingest_batch",
    "ingest_one",
]
