"""Persistence helpers for push registration tokens."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from scholarhub.domain.entities import PushSubscription
from scholarhub.infrastructure.models import PushSubscriptionModel
from scholarhub.utils import ensure_app_timezone


class PushSubscriptionRepository:
    """Store the push tokens each user registered."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(self, user_id: int) -> Sequence[PushSubscription]:
        query = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.user_id == user_id)
            .order_by(PushSubscriptionModel.id)
        )
        return [self._to_entity(model) for model in query.all()]

    def register(self, *, user_id: int, token: str) -> PushSubscription:
        """Attach ``token`` to ``user_id``, moving it if another user owned it."""

        model = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.token == token)
            .first()
        )
        if model is None:
            model = PushSubscriptionModel(user_id=user_id, token=token)
        else:
            model.user_id = user_id
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete_token(self, token: str, *, user_id: int | None = None) -> bool:
        query = self.session.query(PushSubscriptionModel).filter(
            PushSubscriptionModel.token == token
        )
        if user_id is not None:
            query = query.filter(PushSubscriptionModel.user_id == user_id)
        deleted = query.delete(synchronize_session=False)
        self.session.commit()
        return bool(deleted)

    @staticmethod
    def _to_entity(model: PushSubscriptionModel) -> PushSubscription:
        return PushSubscription(
            id=model.id,
            user_id=model.user_id,
            token=model.token,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["PushSubscriptionRepository"]
