"""Register and forget push tokens."""

from __future__ import annotations

from sqlalchemy.orm import Session

from scholarhub.domain.entities import PushSubscription
from scholarhub.infrastructure.repositories import PushSubscriptionRepository


def register_push_token(session: Session, *, user_id: int, token: str) -> PushSubscription:
    token = token.strip()
    if not token:
        raise ValueError("Push token must not be empty")
    return PushSubscriptionRepository(session).register(user_id=user_id, token=token)


def remove_push_token(session: Session, *, user_id: int, token: str) -> bool:
    return PushSubscriptionRepository(session).delete_token(token, user_id=user_id)


__all__ = ["register_push_token", "remove_push_token"]
