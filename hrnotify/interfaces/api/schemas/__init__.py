from .notification import (
    ConnectionStatsRead,
    NotificationListResponse,
    NotificationMarkReadRequest,
    NotificationRead,
    PaginationRead,
    UnreadCountResponse,
    UpdatedCountResponse,
)

__all__ = [
    "ConnectionStatsRead",
    "NotificationListResponse",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "PaginationRead",
    "UnreadCountResponse",
    "UpdatedCountResponse",
]
