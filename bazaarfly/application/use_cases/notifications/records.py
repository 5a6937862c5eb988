"""Use cases for reading and maintaining stored notifications."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from bazaarfly.domain.entities import Notification, NotificationType
from bazaarfly.infrastructure.repositories import NotificationRepository, UserRepository


@dataclass
class NotificationPage:
    """One page of a recipient's notifications plus pagination metadata."""

    notifications: Sequence[Notification]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next_page(self) -> bool:
        return (self.page - 1) * self.limit + len(self.notifications) < self.total

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


def list_user_notifications(
    session: Session,
    user_id: int,
    *,
    page: int = 1,
    limit: int = 20,
    unread_only: bool = False,
) -> NotificationPage:
    """Return the newest notifications addressed to ``user_id``."""

    if page < 1:
        raise ValueError("page must be greater than or equal to 1")
    if limit < 1:
        raise ValueError("limit must be greater than or equal to 1")
    if UserRepository(session).find_active_by_id(user_id) is None:
        raise LookupError("User not found")

    repository = NotificationRepository(session)
    notifications = repository.list_for_recipient(
        user_id, unread_only=unread_only, skip=(page - 1) * limit, limit=limit
    )
    total = repository.count_for_recipient(user_id, unread_only=unread_only)
    return NotificationPage(notifications=notifications, total=total, page=page, limit=limit)


def list_notifications_by_type(
    session: Session,
    notification_type: NotificationType | str,
    *,
    skip: int = 0,
    limit: int = 50,
) -> Sequence[Notification]:
    try:
        notification_type = NotificationType(notification_type)
    except ValueError as exc:
        raise ValueError(f"Unknown notification type: {notification_type!r}") from exc
    return NotificationRepository(session).list_by_type(
        notification_type, skip=skip, limit=limit
    )


def get_notification(session: Session, notification_id: int) -> Notification:
    notification = NotificationRepository(session).get(notification_id)
    if notification is None:
        raise LookupError("Notification not found")
    return notification


def mark_notification_as_read(session: Session, notification_id: int) -> Notification:
    """Mark a notification as read. Already-read notifications are untouched."""

    try:
        return NotificationRepository(session).mark_as_read(notification_id)
    except ValueError as exc:
        raise LookupError("Notification not found") from exc


def delete_notification(session: Session, notification_id: int) -> None:
    try:
        NotificationRepository(session).delete(notification_id)
    except ValueError as exc:
        raise LookupError("Notification not found") from exc


def purge_expired_notifications(session: Session, *, now: datetime | None = None) -> int:
    """Remove every notification whose expiry instant has passed."""

    return NotificationRepository(session).purge_expired(now)


__all__ = [
    "NotificationPage",
    "delete_notification",
    "get_notification",
    "list_notifications_by_type",
    "list_user_notifications",
    "mark_notification_as_read",
    "purge_expired_notifications",
]
