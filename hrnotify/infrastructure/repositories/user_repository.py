"""Read-only directory lookups over the user table."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from hrnotify.domain.entities import DirectoryUser
from hrnotify.infrastructure.models import UserModel


class UserRepository:
    """Resolve role membership and contact details for notification delivery."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, user_id: int) -> DirectoryUser | None:
        with self._session_factory() as session:
            model = session.get(UserModel, user_id)
            return self._to_entity(model) if model else None

    def members_of_role(self, role: str) -> Sequence[DirectoryUser]:
        """Return active users whose role matches ``role`` (case-insensitive)."""

        query = (
            select(UserModel)
            .where(func.lower(UserModel.role) == role.lower())
            .where(UserModel.is_active.is_(True))
            .order_by(UserModel.id)
        )
        with self._session_factory() as session:
            return [self._to_entity(model) for model in session.scalars(query)]

    def add(self, user: DirectoryUser) -> DirectoryUser:
        with self._session_factory() as session:
            model = UserModel(
                id=user.id,
                name=user.name,
                email=user.email,
                role=user.role,
                is_active=user.is_active,
            )
            session.add(model)
            session.commit()
            return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserModel) -> DirectoryUser:
        return DirectoryUser(
            id=model.id,
            role=model.role,
            name=model.name,
            email=model.email,
            is_active=bool(model.is_active),
        )


__all__ = ["UserRepository"]
