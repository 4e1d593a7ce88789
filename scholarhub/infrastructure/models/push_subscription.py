"""SQLAlchemy model for push registration tokens."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from scholarhub.infrastructure.database import Base
from scholarhub.utils import now_in_app_naive_datetime


class PushSubscriptionModel(Base):
    """Push token registered by one of the user's browsers or devices."""

    __tablename__ = "push_subscription"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token = Column(String(512), nullable=False, unique=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["PushSubscriptionModel"]
