"""Public helpers for creating, delivering and reading notifications."""

from .dispatcher import NotificationDispatcher, SendNotificationOptions, send_notification
from .records import (
    NotificationPage,
    delete_notification,
    get_notification,
    list_notifications_by_type,
    list_user_notifications,
    mark_notification_as_read,
    purge_expired_notifications,
)
from .templates import RenderedEmail, TemplateCatalog, default_catalog

__all__ = [
    "NotificationDispatcher",
    "NotificationPage",
    "RenderedEmail",
    "SendNotificationOptions",
    "TemplateCatalog",
    "default_catalog",
    "delete_notification",
    "get_notification",
    "list_notifications_by_type",
    "list_user_notifications",
    "mark_notification_as_read",
    "purge_expired_notifications",
    "send_notification",
]
