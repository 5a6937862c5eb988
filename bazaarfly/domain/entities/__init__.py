"""Domain entities exposed by the application."""

from .notification import (
    ClickAction,
    Notification,
    NotificationChannel,
    NotificationType,
    RelatedEntity,
    RelatedEntityModel,
)
from .user import User

__all__ = [
    "ClickAction",
    "Notification",
    "NotificationChannel",
    "NotificationType",
    "RelatedEntity",
    "RelatedEntityModel",
    "User",
]
