"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from hrnotify.infrastructure.database import Base
from hrnotify.utils import ensure_naive_utc, utc_now


def _naive_utc_now():
    return ensure_naive_utc(utc_now())


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_recipient_read", "recipient_id", "is_read"),
        Index("ix_notification_read_created", "is_read", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default="info")
    category = Column(String(50), nullable=False, default="system", index=True)
    priority = Column(String(10), nullable=False, default="low")
    action_url = Column(String(255), nullable=True)
    metadata_json = Column("metadata", JSON, nullable=True)
    is_read = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    read_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=_naive_utc_now)

    recipient = relationship("UserModel", lazy="select")


__all__ = ["NotificationModel"]
