"""Persistence layer for user data."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from scholarhub.domain.entities import User
from scholarhub.infrastructure.models import UserModel


class UserRepository:
    """Provide the user lookups needed by authentication and notifications."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_active(self) -> Sequence[User]:
        query = (
            self.session.query(UserModel)
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id)
        )
        return [self._to_entity(model) for model in query.all()]

    def list_active_ids(self) -> list[int]:
        query = self.session.query(UserModel.id).filter(UserModel.is_active.is_(True))
        return [user_id for (user_id,) in query.order_by(UserModel.id).all()]

    def get(self, user_id: int) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = self.session.query(UserModel).filter(UserModel.email == email).first()
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel(
            name=user.name,
            email=user.email,
            password=user.password,
            role=user.role,
            is_active=user.is_active,
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
            password=model.password,
            role=model.role,
            is_active=model.is_active,
            created_at=model.created_at,
        )


__all__ = ["UserRepository"]
