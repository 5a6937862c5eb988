"""Endpoints for dispatching and maintaining notifications."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from bazaarfly.application.use_cases.notifications import (
    NotificationDispatcher,
    SendNotificationOptions,
    delete_notification as delete_notification_uc,
    get_notification as get_notification_uc,
    list_notifications_by_type as list_notifications_by_type_uc,
    mark_notification_as_read as mark_notification_as_read_uc,
)
from bazaarfly.domain.entities import (
    ClickAction,
    Notification,
    NotificationType,
    RelatedEntity,
)
from bazaarfly.infrastructure.database import get_db
from bazaarfly.infrastructure.email import EmailConfigurationError, EmailDeliveryError
from bazaarfly.interfaces.api.dependencies import get_dispatcher
from bazaarfly.interfaces.api.schemas import (
    ClickActionSchema,
    NotificationCreate,
    NotificationRead,
    RelatedEntitySchema,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def notification_to_schema(notification: Notification) -> NotificationRead:
    click_action = None
    if notification.click_action is not None:
        click_action = ClickActionSchema(
            url=notification.click_action.url,
            external=notification.click_action.external,
        )
    related_entity = None
    if notification.related_entity is not None:
        related_entity = RelatedEntitySchema(
            id=notification.related_entity.id,
            model=notification.related_entity.model,
        )
    return NotificationRead(
        id=notification.id or 0,
        recipient=notification.recipient_id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        channels=list(notification.channels),
        click_action=click_action,
        related_entity=related_entity,
        is_read=notification.is_read,
        read_at=notification.read_at,
        expires_at=notification.expires_at,
        created_at=notification.created_at,
    )


@router.post("/", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> NotificationRead:
    """Persist a notification and deliver it on the requested channels."""

    options = SendNotificationOptions(
        recipient=payload.recipient,
        type=payload.type,
        title=payload.title,
        message=payload.message,
        channels=payload.channels,
        template_payload=payload.template_payload,
        click_action=(
            ClickAction(url=payload.click_action.url, external=payload.click_action.external)
            if payload.click_action
            else None
        ),
        related_entity=(
            RelatedEntity(id=payload.related_entity.id, model=payload.related_entity.model)
            if payload.related_entity
            else None
        ),
        expires_at=payload.expires_at,
    )
    try:
        notification = dispatcher.send_notification(options)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except EmailConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except EmailDeliveryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return notification_to_schema(notification)


@router.get("/", response_model=list[NotificationRead])
def list_notifications_by_type(
    type: NotificationType,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[NotificationRead]:
    """Return notifications of one kind, newest first."""

    notifications = list_notifications_by_type_uc(db, type, skip=skip, limit=limit)
    return [notification_to_schema(notification) for notification in notifications]


@router.get("/{notification_id}", response_model=NotificationRead)
def read_notification(notification_id: int, db: Session = Depends(get_db)) -> NotificationRead:
    try:
        notification = get_notification_uc(db, notification_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return notification_to_schema(notification)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_as_read(
    notification_id: int, db: Session = Depends(get_db)
) -> NotificationRead:
    """Mark the notification as read; repeated calls keep the first ``read_at``."""

    try:
        notification = mark_notification_as_read_uc(db, notification_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return notification_to_schema(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(notification_id: int, db: Session = Depends(get_db)) -> Response:
    try:
        delete_notification_uc(db, notification_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router", "notification_to_schema"]
