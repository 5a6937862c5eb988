"""SQLAlchemy model for the user table."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import expression

from bazaarfly.infrastructure.database import Base
from bazaarfly.utils import now_for_storage


class UserModel(Base):
    """Database representation of a marketplace user."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(120), nullable=True)
    phone_number = Column(String(20), nullable=True, unique=True)
    role = Column(String(20), nullable=False, default="user")
    is_deleted = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=now_for_storage)


__all__ = ["UserModel"]
