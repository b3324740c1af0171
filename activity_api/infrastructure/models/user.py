"""SQLAlchemy model for the user directory table."""

from sqlalchemy import Column, DateTime, Integer, String, func

from activity_api.infrastructure.database import Base


class UserModel(Base):
    """Directory entry maintained by the identity service."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(120), nullable=False, unique=True, index=True)
    role = Column(String(30), nullable=False, default="user")
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["UserModel"]
