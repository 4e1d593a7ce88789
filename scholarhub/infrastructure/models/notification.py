"""SQLAlchemy model for persisted notifications."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from scholarhub.infrastructure.database import Base
from scholarhub.utils import now_in_app_naive_datetime


def _generate_id() -> str:
    return str(uuid4())


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"

    id = Column(String(36), primary_key=True, default=_generate_id)
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False, default="info")
    action_url = Column(String(2048), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    read_at = Column(DateTime(), nullable=True)

    user = relationship("UserModel", lazy="select")


__all__ = ["NotificationModel"]
