"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import expression

from bazaarfly.infrastructure.database import Base
from bazaarfly.utils import now_for_storage


class NotificationModel(Base):
    """Database representation for notification records.

    A ``NULL`` recipient marks a broadcast. ``related_entity_*`` is a lookup
    hint only, so it carries no foreign key.
    """

    __tablename__ = "notification"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(
        Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    type = Column(String(64), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    click_action_url = Column(String(500), nullable=True)
    click_action_external = Column(Boolean, nullable=False, default=False)
    related_entity_id = Column(String(64), nullable=True)
    related_entity_model = Column(String(32), nullable=True)
    channels = Column(JSON, nullable=False, default=list)
    is_read = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    read_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=now_for_storage)
    updated_at = Column(
        DateTime, nullable=False, default=now_for_storage, onupdate=now_for_storage
    )


# "all notifications of kind Y, newest first"
Index(
    "ix_notification_type_created_at",
    NotificationModel.type,
    NotificationModel.created_at.desc(),
)
# "unread notifications for user X, newest first"
Index(
    "ix_notification_recipient_unread",
    NotificationModel.recipient_id,
    NotificationModel.is_read,
    NotificationModel.created_at.desc(),
)
# TTL sweep
Index("ix_notification_expires_at", NotificationModel.expires_at)


__all__ = ["NotificationModel"]
