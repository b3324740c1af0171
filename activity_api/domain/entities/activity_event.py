"""Domain entities describing tracked user activity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, Union

MetadataValue = Union[str, int, float, bool, None]

ACTIVITY_TYPES: Final[tuple[str, ...]] = (
    "register",
    "email_verified",
    "login",
    "logout",
    "page_view",
    "scroll",
    "button_click",
    "form_submit",
    "course_view",
    "course_enroll",
    "video_play",
    "video_pause",
    "video_complete",
    "test_start",
    "test_submit",
    "download",
    "search",
    "filter",
    "contact_submit",
    "profile_update",
    "password_change",
    "other",
)

PAGE_VIEW: Final[str] = "page_view"
LOGIN: Final[str] = "login"
SCROLL: Final[str] = "scroll"
BUTTON_CLICK: Final[str] = "button_click"


@dataclass(frozen=True)
class PageInfo:
    path: str | None = None
    title: str | None = None
    referrer: str | None = None


@dataclass(frozen=True)
class ActionInfo:
    element: str | None = None
    value: str | None = None
    metadata: dict[str, MetadataValue] = field(default_factory=dict)


@dataclass(frozen=True)
class ScrollInfo:
    depth: float | None = None
    max_depth: float | None = None


@dataclass(frozen=True)
class CourseInfo:
    course_id: str | None = None
    course_name: str | None = None
    section: str | None = None
    progress: float | None = None


@dataclass(frozen=True)
class DeviceInfo:
    user_agent: str | None = None
    platform: str | None = None
    is_mobile: bool | None = None
    screen_width: int | None = None
    screen_height: int | None = None


@dataclass(frozen=True)
class LocationInfo:
    ip: str | None = None
    country: str | None = None
    city: str | None = None


@dataclass(frozen=True)
class ActivityDraft:
    """Activity submitted by a client, before the store assigns an identity."""

    activity_type: str
    session_id: str | None = None
    page: PageInfo | None = None
    action: ActionInfo | None = None
    scroll: ScrollInfo | None = None
    course: CourseInfo | None = None
    device: DeviceInfo | None = None
    location: LocationInfo | None = None
    duration: float | None = None
    timestamp: datetime | None = None


@dataclass(frozen=True)
class ActivityEvent:
    """Immutable record of one user interaction."""

    id: int | None
    user_id: int
    session_id: str
    session_id_supplied: bool
    activity_type: str
    timestamp: datetime
    page: PageInfo | None = None
    action: ActionInfo | None = None
    scroll: ScrollInfo | None = None
    course: CourseInfo | None = None
    device: DeviceInfo | None = None
    location: LocationInfo | None = None
    duration: float | None = None

    @property
    def client_session_id(self) -> str | None:
        """Return the session id only when the client supplied it."""

        return self.session_id if self.session_id_supplied else None


__all__ = [
    "ACTIVITY_TYPES",
    "PAGE_VIEW",
    "LOGIN",
    "SCROLL",
    "BUTTON_CLICK",
    "MetadataValue",
    "PageInfo",
    "ActionInfo",
    "ScrollInfo",
    "CourseInfo",
    "DeviceInfo",
    "LocationInfo",
    "ActivityDraft",
    "ActivityEvent",
]
