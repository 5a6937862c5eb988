"""FastAPI dependency utilities."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from bazaarfly.application.use_cases.notifications import NotificationDispatcher
from bazaarfly.config import Settings, get_settings
from bazaarfly.infrastructure.database import get_db
from bazaarfly.infrastructure.email import Mailer


def get_mailer(request: Request) -> Mailer:
    """Return the process-wide mailer created by the application lifespan."""

    return request.app.state.mailer


def get_dispatcher(
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
) -> NotificationDispatcher:
    return NotificationDispatcher(db, mailer)


def get_app_settings() -> Settings:
    return get_settings()
