"""Persistence helpers for notification entities."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from bazaarfly.domain.entities import (
    ClickAction,
    Notification,
    NotificationChannel,
    NotificationType,
    RelatedEntity,
    RelatedEntityModel,
)
from bazaarfly.infrastructure.models import NotificationModel
from bazaarfly.utils import (
    from_storage_datetime,
    now_in_app_timezone,
    to_storage_datetime,
)

logger = logging.getLogger(__name__)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects.

    Rows whose ``expires_at`` has passed are invisible to every read method
    even before :meth:`purge_expired` removes them.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create_notification(self, notification: Notification) -> Notification:
        """Persist ``notification`` as a new record and return the stored copy."""

        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception(
                "Could not persist %s notification", notification.type.value
            )
            raise
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: int) -> Notification | None:
        model = self._get_model(notification_id)
        return self._to_entity(model) if model else None

    def mark_as_read(self, notification_id: int) -> Notification:
        """Mark the record as read; a second call keeps the first ``read_at``."""

        model = self._get_model(notification_id)
        if model is None:
            msg = f"Notification with id {notification_id} not found"
            raise ValueError(msg)

        notification = self._to_entity(model)
        if not notification.mark_as_read(now_in_app_timezone()):
            return notification

        model.is_read = True
        model.read_at = to_storage_datetime(notification.read_at)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_for_recipient(
        self,
        recipient_id: int,
        *,
        unread_only: bool = False,
        skip: int = 0,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = self._recipient_query(recipient_id, unread_only=unread_only)
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        ).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_for_recipient(self, recipient_id: int, *, unread_only: bool = False) -> int:
        return self._recipient_query(recipient_id, unread_only=unread_only).count()

    def list_by_type(
        self,
        notification_type: NotificationType,
        *,
        skip: int = 0,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = (
            self._visible_query()
            .filter(NotificationModel.type == notification_type.value)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_broadcasts(self, *, skip: int = 0, limit: int | None = 50) -> Sequence[Notification]:
        query = (
            self._visible_query()
            .filter(NotificationModel.recipient_id.is_(None))
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def delete(self, notification_id: int) -> None:
        model = self._get_model(notification_id)
        if model is None:
            msg = f"Notification with id {notification_id} not found"
            raise ValueError(msg)
        self.session.delete(model)
        self.session.commit()

    def purge_expired(self, now: datetime | None = None) -> int:
        """Delete every record whose ``expires_at`` is at or before ``now``."""

        cutoff = to_storage_datetime(now or now_in_app_timezone())
        removed = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.expires_at.is_not(None))
            .filter(NotificationModel.expires_at <= cutoff)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        if removed:
            logger.info("Purged %s expired notifications", removed)
        return removed

    def _visible_query(self) -> Query:
        cutoff = to_storage_datetime(now_in_app_timezone())
        return self.session.query(NotificationModel).filter(
            or_(
                NotificationModel.expires_at.is_(None),
                NotificationModel.expires_at > cutoff,
            )
        )

    def _recipient_query(self, recipient_id: int, *, unread_only: bool) -> Query:
        query = self._visible_query().filter(NotificationModel.recipient_id == recipient_id)
        if unread_only:
            query = query.filter(NotificationModel.is_read.is_(False))
        return query

    def _get_model(self, notification_id: int) -> NotificationModel | None:
        return self._visible_query().filter(NotificationModel.id == notification_id).first()

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, notification: Notification
    ) -> None:
        model.recipient_id = notification.recipient_id
        model.type = notification.type.value
        model.title = notification.title
        model.message = notification.message
        model.channels = [channel.value for channel in notification.channels]
        if notification.click_action is not None:
            model.click_action_url = notification.click_action.url
            model.click_action_external = notification.click_action.external
        if notification.related_entity is not None:
            model.related_entity_id = str(notification.related_entity.id)
            model.related_entity_model = notification.related_entity.model.value
        model.is_read = notification.is_read
        model.read_at = to_storage_datetime(notification.read_at)
        model.expires_at = to_storage_datetime(notification.expires_at)
        if notification.created_at is not None:
            model.created_at = to_storage_datetime(notification.created_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        click_action = None
        if model.click_action_url:
            click_action = ClickAction(
                url=model.click_action_url,
                external=bool(model.click_action_external),
            )
        related_entity = None
        if model.related_entity_id and model.related_entity_model:
            related_entity = RelatedEntity(
                id=model.related_entity_id,
                model=RelatedEntityModel(model.related_entity_model),
            )
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            type=NotificationType(model.type),
            title=model.title,
            message=model.message,
            channels=[NotificationChannel(value) for value in model.channels or []],
            click_action=click_action,
            related_entity=related_entity,
            is_read=bool(model.is_read),
            read_at=from_storage_datetime(model.read_at),
            expires_at=from_storage_datetime(model.expires_at),
            created_at=from_storage_datetime(model.created_at),
            updated_at=from_storage_datetime(model.updated_at),
        )


__all__ = ["NotificationRepository"]
