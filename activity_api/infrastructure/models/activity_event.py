"""SQLAlchemy model for append-only activity events."""

from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import expression
from sqlalchemy.types import JSON

from activity_api.infrastructure.database import Base

_metadata_json_type = JSON().with_variant(JSONB(), "postgresql")


class ActivityEventModel(Base):
    """Database representation of one tracked interaction.

    Side channels are flattened into columns so they can be filtered and
    grouped without dialect specific JSON operators.
    """

    __tablename__ = "activity_event"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    session_id = Column(String(120), nullable=False, index=True)
    session_id_supplied = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    activity_type = Column(String(30), nullable=False, index=True)

    page_path = Column(String(512), nullable=True)
    page_title = Column(String(255), nullable=True)
    page_referrer = Column(String(512), nullable=True)

    action_element = Column(String(255), nullable=True)
    action_value = Column(Text, nullable=True)
    action_metadata = Column(_metadata_json_type, nullable=True)

    scroll_depth = Column(Float, nullable=True)
    scroll_max_depth = Column(Float, nullable=True)

    course_id = Column(String(120), nullable=True)
    course_name = Column(String(255), nullable=True)
    course_section = Column(String(255), nullable=True)
    course_progress = Column(Float, nullable=True)

    device_user_agent = Column(String(512), nullable=True)
    device_platform = Column(String(120), nullable=True)
    device_is_mobile = Column(Boolean, nullable=True)
    device_screen_width = Column(Integer, nullable=True)
    device_screen_height = Column(Integer, nullable=True)

    location_ip = Column(String(64), nullable=True)
    location_country = Column(String(120), nullable=True)
    location_city = Column(String(120), nullable=True)

    duration = Column(Float, nullable=True)
    timestamp = Column(DateTime, nullable=False, index=True)

    __table_args__ = (
        Index("ix_activity_event_user_timestamp", "user_id", "timestamp"),
        Index("ix_activity_event_type_timestamp", "activity_type", "timestamp"),
        Index("ix_activity_event_session_timestamp", "session_id", "timestamp"),
        Index("ix_activity_event_page_timestamp", "page_path", "timestamp"),
    )


__all__ = ["ActivityEventModel"]
