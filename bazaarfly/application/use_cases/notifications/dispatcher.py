"""Persist notifications and fan them out to their delivery channels."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from bazaarfly.domain.entities import (
    ClickAction,
    Notification,
    NotificationChannel,
    NotificationType,
    RelatedEntity,
    RelatedEntityModel,
)
from bazaarfly.infrastructure.email import Mailer
from bazaarfly.infrastructure.repositories import NotificationRepository, UserRepository

from .templates import RenderedEmail, TemplateCatalog, default_catalog

logger = logging.getLogger(__name__)


@dataclass
class SendNotificationOptions:
    """Everything needed to create one notification and deliver it."""

    type: NotificationType | str
    title: str
    message: str
    channels: Iterable[NotificationChannel | str]
    recipient: int | None = None
    template_payload: Mapping[str, Any] = field(default_factory=dict)
    click_action: ClickAction | None = None
    related_entity: RelatedEntity | None = None
    expires_at: datetime | None = None

    def validate(self) -> "SendNotificationOptions":
        """Return a normalised copy or raise ``ValueError``."""

        notification_type = _coerce(NotificationType, self.type, "notification type")
        title = (self.title or "").strip()
        message = (self.message or "").strip()
        if not title:
            raise ValueError("Notification title is required")
        if not message:
            raise ValueError("Notification message is required")

        channels: list[NotificationChannel] = []
        for raw in self.channels or ():
            channel = _coerce(NotificationChannel, raw, "channel")
            if channel not in channels:
                channels.append(channel)
        if not channels:
            raise ValueError("At least one delivery channel is required")

        related_entity = self.related_entity
        if related_entity is not None:
            related_entity = RelatedEntity(
                id=str(related_entity.id),
                model=_coerce(RelatedEntityModel, related_entity.model, "related entity model"),
            )

        return SendNotificationOptions(
            type=notification_type,
            title=title,
            message=message,
            channels=channels,
            recipient=self.recipient,
            template_payload=dict(self.template_payload or {}),
            click_action=self.click_action,
            related_entity=related_entity,
            expires_at=self.expires_at,
        )


def _coerce(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValueError(f"Unknown {label}: {value!r}") from exc


class NotificationDispatcher:
    """Create a notification record, then deliver it on each requested channel.

    The record is committed before any delivery is attempted and is returned
    whatever happens on the channels. A recipient without a usable email
    address silently skips the email channel; a transport failure propagates
    to the caller.
    """

    def __init__(
        self,
        session: Session,
        mailer: Mailer,
        *,
        catalog: TemplateCatalog | None = None,
    ) -> None:
        self.session = session
        self.mailer = mailer
        self.catalog = catalog or default_catalog
        self.notifications = NotificationRepository(session)
        self.users = UserRepository(session)

    def send_notification(self, options: SendNotificationOptions) -> Notification:
        options = options.validate()
        notification = self.notifications.create_notification(
            Notification(
                id=None,
                recipient_id=options.recipient,
                type=options.type,
                title=options.title,
                message=options.message,
                channels=list(options.channels),
                click_action=options.click_action,
                related_entity=options.related_entity,
                expires_at=options.expires_at,
            )
        )
        logger.info(
            "Created %s notification %s for recipient %s",
            notification.type.value,
            notification.id,
            notification.recipient_id,
        )

        if notification.has_channel(NotificationChannel.EMAIL):
            self._send_email(notification, options.template_payload)

        if notification.has_channel(NotificationChannel.SMS):
            logger.info(
                "SMS delivery is not implemented; skipping notification %s (%s)",
                notification.id,
                notification.title,
            )

        if notification.has_channel(NotificationChannel.PUSH):
            logger.info(
                "Push delivery is not implemented; skipping notification %s (%s)",
                notification.id,
                notification.title,
            )

        return notification

    def _send_email(self, notification: Notification, payload: Mapping[str, Any]) -> None:
        if notification.recipient_id is None:
            logger.info(
                "Notification %s has no recipient; skipping email", notification.id
            )
            return

        user = self.users.find_active_by_id(notification.recipient_id)
        if user is None or not user.has_email():
            logger.info(
                "Recipient %s has no email address; skipping email for notification %s",
                notification.recipient_id,
                notification.id,
            )
            return

        context: dict[str, Any] = {
            "title": notification.title,
            "message": notification.message,
            "name": user.name,
        }
        context.update(payload)

        rendered = self.catalog.render(notification.type, context)
        if rendered is None:
            rendered = RenderedEmail(
                subject=notification.title,
                html=f"<p>{notification.message}</p>",
            )
        self.mailer.send_email(to=user.email, subject=rendered.subject, html=rendered.html)


def send_notification(
    session: Session,
    mailer: Mailer,
    *,
    catalog: TemplateCatalog | None = None,
    **options: Any,
) -> Notification:
    """Shortcut for ``NotificationDispatcher(...).send_notification(...)``."""

    dispatcher = NotificationDispatcher(session, mailer, catalog=catalog)
    return dispatcher.send_notification(SendNotificationOptions(**options))


__all__ = [
    "NotificationDispatcher",
    "SendNotificationOptions",
    "send_notification",
]
