"""Shared fixtures for the notification test-suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure the project root (which contains the ``bazaarfly`` package) is importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bazaarfly.domain.entities import User
from bazaarfly.infrastructure.database import initialize_database
from bazaarfly.infrastructure.repositories import UserRepository


class RecordingMailer:
    """Mailer double that remembers every message it was asked to send."""

    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[dict[str, object]] = []
        self.error = error

    def send_email(self, to, subject, html, text=None) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})


@pytest.fixture()
def engine():
    """In-memory SQLite engine with every table created."""

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def make_mailer():
    """Build a mailer double, optionally one that raises ``error`` on send."""

    return RecordingMailer


@pytest.fixture()
def make_user(session):
    """Factory persisting a user and returning the stored entity."""

    counter = {"value": 0}

    def factory(name: str = "Alice", email: str | None = "alice@example.com", **extra) -> User:
        counter["value"] += 1
        extra.setdefault("phone_number", f"+8801700000{counter['value']:03d}")
        user = User(id=None, name=name, email=email, **extra)
        return UserRepository(session).create(user)

    return factory
