"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from scholarhub.domain.entities import Notification
from scholarhub.infrastructure.models import NotificationModel
from scholarhub.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(
        self,
        user_id: int,
        *,
        limit: int | None = None,
    ) -> Sequence[Notification]:
        query = self._query_for_user(user_id).order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_unread_for_user(self, user_id: int) -> int:
        return (
            self._query_for_user(user_id)
            .filter(NotificationModel.read_at.is_(None))
            .count()
        )

    def get_for_user(self, notification_id: str, *, user_id: int) -> Notification | None:
        model = self._get_model_for_user(notification_id, user_id)
        return self._to_entity(model) if model else None

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel(
            user_id=notification.user_id,
            title=notification.title,
            message=notification.message,
            type=notification.type,
            action_url=notification.action_url,
            created_at=ensure_app_naive_datetime(
                notification.created_at or now_in_app_timezone()
            ),
            read_at=None,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(self, notification_id: str, *, user_id: int) -> Notification | None:
        """Set ``read_at`` on one record unless it is already read."""

        model = self._get_model_for_user(notification_id, user_id)
        if model is None:
            return None
        if model.read_at is None:
            model.read_at = ensure_app_naive_datetime(now_in_app_timezone())
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def mark_many_as_read(self, notification_ids: Iterable[str], *, user_id: int) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id]
        if not ids:
            return 0
        updated = (
            self._query_for_user(user_id)
            .filter(NotificationModel.id.in_(ids))
            .filter(NotificationModel.read_at.is_(None))
            .update(
                {NotificationModel.read_at: ensure_app_naive_datetime(now_in_app_timezone())},
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def mark_all_as_read(self, user_id: int) -> int:
        updated = (
            self._query_for_user(user_id)
            .filter(NotificationModel.read_at.is_(None))
            .update(
                {NotificationModel.read_at: ensure_app_naive_datetime(now_in_app_timezone())},
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def delete_for_user(self, notification_id: str, *, user_id: int) -> bool:
        model = self._get_model_for_user(notification_id, user_id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    def delete_all_for_user(self, user_id: int) -> int:
        deleted = self._query_for_user(user_id).delete(synchronize_session=False)
        self.session.commit()
        return deleted

    def _query_for_user(self, user_id: int):
        return self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )

    def _get_model_for_user(
        self, notification_id: str, user_id: int
    ) -> NotificationModel | None:
        return (
            self._query_for_user(user_id)
            .filter(NotificationModel.id == notification_id)
            .first()
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            message=model.message,
            type=model.type,
            action_url=model.action_url,
            created_at=ensure_app_timezone(model.created_at),
            read_at=ensure_app_timezone(model.read_at),
        )


__all__ = ["NotificationRepository"]
