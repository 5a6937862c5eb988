"""User-scoped notification center endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from bazaarfly.application.use_cases.notifications import list_user_notifications
from bazaarfly.config import Settings
from bazaarfly.infrastructure.database import get_db
from bazaarfly.interfaces.api.dependencies import get_app_settings
from bazaarfly.interfaces.api.schemas import NotificationPageRead, PaginationRead

from .notifications import notification_to_schema

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/notifications", response_model=NotificationPageRead)
def list_notifications_for_user(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    unread_only: bool = False,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> NotificationPageRead:
    """Return the user's notifications, newest first."""

    try:
        result = list_user_notifications(
            db,
            user_id,
            page=page,
            limit=limit or settings.notification_page_size,
            unread_only=unread_only,
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return NotificationPageRead(
        notifications=[notification_to_schema(item) for item in result.notifications],
        pagination=PaginationRead(
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
            has_next_page=result.has_next_page,
            has_prev_page=result.has_prev_page,
        ),
    )


__all__ = ["router"]
