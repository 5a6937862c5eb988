from .notification import (
    ClickActionSchema,
    NotificationCreate,
    NotificationPageRead,
    NotificationRead,
    PaginationRead,
    RelatedEntitySchema,
)

__all__ = [
    "ClickActionSchema",
    "NotificationCreate",
    "NotificationPageRead",
    "NotificationRead",
    "PaginationRead",
    "RelatedEntitySchema",
]
