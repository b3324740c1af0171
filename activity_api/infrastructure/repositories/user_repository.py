"""Read access to the user directory."""

from __future__ import annotations

from sqlalchemy.orm import Session

from activity_api.domain.entities import User
from activity_api.infrastructure.models import UserModel
from activity_api.utils import ensure_app_timezone


class UserRepository:
    """Look up users owned by the identity collaborator."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = (
            self.session.query(UserModel)
            .filter(UserModel.email == email)
            .one_or_none()
        )
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        """Insert a directory entry; used by seeding scripts and tests."""

        model = UserModel(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            role=model.role,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["UserRepository"]
