"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from bazaarfly.domain.entities import (
    NotificationChannel,
    NotificationType,
    RelatedEntityModel,
)


class ClickActionSchema(BaseModel):
    """Navigation target attached to a notification."""

    url: str = Field(..., min_length=1)
    external: bool = False


class RelatedEntitySchema(BaseModel):
    """Weak back-reference to the domain object behind a notification."""

    id: str = Field(..., min_length=1)
    model: RelatedEntityModel


class NotificationCreate(BaseModel):
    """Payload accepted when dispatching a new notification."""

    model_config = ConfigDict(populate_by_name=True)

    recipient: int | None = None
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    channels: list[NotificationChannel] = Field(..., min_length=1)
    template_payload: dict[str, Union[str, int, float]] = Field(
        default_factory=dict, alias="templatePayload"
    )
    click_action: ClickActionSchema | None = Field(default=None, alias="clickAction")
    related_entity: RelatedEntitySchema | None = Field(default=None, alias="relatedEntity")
    expires_at: datetime | None = Field(default=None, alias="expiresAt")


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    recipient: int | None
    type: NotificationType
    title: str
    message: str
    channels: list[NotificationChannel]
    click_action: ClickActionSchema | None = None
    related_entity: RelatedEntitySchema | None = None
    is_read: bool
    read_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime


class PaginationRead(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class NotificationPageRead(BaseModel):
    """A page of notifications for one recipient."""

    notifications: list[NotificationRead]
    pagination: PaginationRead


__all__ = [
    "ClickActionSchema",
    "NotificationCreate",
    "NotificationPageRead",
    "NotificationRead",
    "PaginationRead",
    "RelatedEntitySchema",
]
