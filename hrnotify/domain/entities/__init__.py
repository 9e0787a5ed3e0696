"""Domain entities exposed by the application."""

from .notification import (
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_TYPE_ERROR,
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPE_SUCCESS,
    NOTIFICATION_TYPE_WARNING,
    NOTIFICATION_TYPES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    CleanupResult,
    FanOutResult,
    InvalidNotificationPayload,
    NotificationFilter,
    NotificationPage,
    NotificationPayload,
    NotificationRecord,
    Pagination,
)
from .user import DirectoryUser

__all__ = [
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_TYPE_ERROR",
    "NOTIFICATION_TYPE_INFO",
    "NOTIFICATION_TYPE_SUCCESS",
    "NOTIFICATION_TYPE_WARNING",
    "NOTIFICATION_TYPES",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "CleanupResult",
    "FanOutResult",
    "InvalidNotificationPayload",
    "NotificationFilter",
    "NotificationPage",
    "NotificationPayload",
    "NotificationRecord",
    "Pagination",
    "DirectoryUser",
]
