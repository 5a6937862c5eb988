"""Domain entity representing a marketplace user."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """Subset of the user directory needed to address notifications."""

    id: int | None
    name: str
    email: str | None
    phone_number: str | None = None
    role: str = "user"
    is_deleted: bool = False
    deleted_at: datetime | None = None
    created_at: datetime | None = None

    def has_email(self) -> bool:
        """Return ``True`` when the user can be reached by email."""

        return bool(self.email and self.email.strip())


__all__ = ["User"]
