"""Shared fixtures: a throwaway SQLite database and authenticated clients."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

TEST_DB_PATH = Path(__file__).parent / "test_activity.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_TIMEZONE"] = "UTC"

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from activity_api.domain.entities import ActivityEvent, PageInfo, User
from activity_api.infrastructure import database, models  # noqa: F401
from activity_api.infrastructure.repositories import (
    ActivityEventRepository,
    UserRepository,
)
from activity_api.infrastructure.security import create_access_token

BASE_TIME = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def fresh_database():
    """Recreate every table before each test."""

    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.Base.metadata.create_all(bind=database.engine)
    yield


@pytest.fixture(scope="session", autouse=True)
def remove_database_file():
    yield
    database.engine.dispose()
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()


@pytest.fixture()
def db_session():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def users(db_session) -> dict[str, User]:
    """Seed two regular users and one administrator."""

    repository = UserRepository(db_session)
    return {
        "alice": repository.create(
            User(id=1, name="Alice Moreno", email="alice@example.com", role="user")
        ),
        "bob": repository.create(
            User(id=2, name="Bob Stone", email="bob@example.com", role="user")
        ),
        "admin": repository.create(
            User(id=3, name="Carla Admin", email="carla@example.com", role="admin")
        ),
    }


@pytest.fixture()
def client():
    """Return a test client bound to a clean application instance."""

    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def auth_headers(user_id: int, role: str = "user") -> dict[str, str]:
    token = create_access_token({"sub": str(user_id), "role": role})
    return {"Authorization": f"Bearer {token}"}


def make_event(
    minutes: float,
    *,
    event_id: int | None = None,
    user_id: int = 1,
    activity_type: str = "page_view",
    session_id: str | None = None,
    path: str | None = None,
    duration: float | None = None,
    base: datetime = BASE_TIME,
) -> ActivityEvent:
    """Build an event ``minutes`` after ``base``."""

    return ActivityEvent(
        id=event_id,
        user_id=user_id,
        session_id=session_id or f"session_{user_id}_generated",
        session_id_supplied=session_id is not None,
        activity_type=activity_type,
        timestamp=base + timedelta(minutes=minutes),
        page=PageInfo(path=path, title=f"Page {path}") if path else None,
        duration=duration,
    )


def store(db_session, *events: ActivityEvent) -> list[ActivityEvent]:
    return ActivityEventRepository(db_session).add_many(list(events))
