"""Domain entities describing persisted notifications and their payloads."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_TYPE_INFO = "info"
NOTIFICATION_TYPE_SUCCESS = "success"
NOTIFICATION_TYPE_WARNING = "warning"
NOTIFICATION_TYPE_ERROR = "error"

NOTIFICATION_TYPES = frozenset(
    {
        NOTIFICATION_TYPE_INFO,
        NOTIFICATION_TYPE_SUCCESS,
        NOTIFICATION_TYPE_WARNING,
        NOTIFICATION_TYPE_ERROR,
    }
)

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"

NOTIFICATION_PRIORITIES = frozenset({PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH})

_DEFAULT_PRIORITY_BY_TYPE = {
    NOTIFICATION_TYPE_INFO: PRIORITY_LOW,
    NOTIFICATION_TYPE_SUCCESS: PRIORITY_MEDIUM,
    NOTIFICATION_TYPE_WARNING: PRIORITY_HIGH,
    NOTIFICATION_TYPE_ERROR: PRIORITY_HIGH,
}


class InvalidNotificationPayload(ValueError):
    """Raised when a notification payload cannot be persisted."""


@dataclass(frozen=True)
class NotificationPayload:
    """Content of a notification before it is addressed to a recipient."""

    title: str
    message: str
    type: str = NOTIFICATION_TYPE_INFO
    category: str = "system"
    metadata: dict[str, Any] | None = None
    priority: str | None = None
    action_url: str | None = None

    def validate(self) -> None:
        """Raise :class:`InvalidNotificationPayload` when required fields are invalid."""

        if not (self.title or "").strip():
            raise InvalidNotificationPayload("Notification title is required")
        if not (self.message or "").strip():
            raise InvalidNotificationPayload("Notification message is required")
        if self.type not in NOTIFICATION_TYPES:
            raise InvalidNotificationPayload(
                f"Unsupported notification type '{self.type}'"
            )
        if self.priority is not None and self.priority not in NOTIFICATION_PRIORITIES:
            raise InvalidNotificationPayload(
                f"Unsupported notification priority '{self.priority}'"
            )

    @property
    def action(self) -> str | None:
        """Return ``metadata['action']`` when present."""

        if not self.metadata:
            return None
        action = self.metadata.get("action")
        return str(action) if action is not None else None

    def effective_priority(self) -> str:
        return self.priority or _DEFAULT_PRIORITY_BY_TYPE.get(self.type, PRIORITY_MEDIUM)


@dataclass
class NotificationRecord:
    """Durable notification addressed to a single recipient."""

    id: int | None
    recipient_id: int
    title: str
    message: str
    type: str = NOTIFICATION_TYPE_INFO
    category: str = "system"
    metadata: dict[str, Any] | None = None
    priority: str = PRIORITY_LOW
    action_url: str | None = None
    is_read: bool = False
    created_at: datetime | None = None

    @classmethod
    def from_payload(
        cls,
        recipient_id: int,
        payload: NotificationPayload,
        *,
        created_at: datetime | None = None,
    ) -> "NotificationRecord":
        return cls(
            id=None,
            recipient_id=recipient_id,
            title=payload.title,
            message=payload.message,
            type=payload.type,
            category=payload.category,
            metadata=dict(payload.metadata) if payload.metadata is not None else None,
            priority=payload.effective_priority(),
            action_url=payload.action_url,
            is_read=False,
            created_at=created_at,
        )


@dataclass(frozen=True)
class NotificationFilter:
    """Query options used when listing notifications for a user."""

    page: int = 1
    page_size: int = 20
    is_read: bool | None = None
    category: str | None = None
    type: str | None = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be greater than or equal to 1")
        if not 1 <= self.page_size <= 100:
            raise ValueError("page_size must be between 1 and 100")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class Pagination:
    """Pagination metadata accompanying a page of notifications."""

    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total


@dataclass
class NotificationPage:
    """A page of notifications plus the recipient's unread counter."""

    items: list[NotificationRecord]
    pagination: Pagination
    unread_count: int = 0


@dataclass
class FanOutResult:
    """Outcome of a role-targeted notification."""

    records: list[NotificationRecord] = field(default_factory=list)
    pushed: int = 0

    def extend(self, other: "FanOutResult") -> None:
        self.records.extend(other.records)
        self.pushed += other.pushed


@dataclass(frozen=True)
class CleanupResult:
    """Number of notifications removed by the retention cleanup."""

    deleted_count: int


__all__ = [
    "NOTIFICATION_TYPE_INFO",
    "NOTIFICATION_TYPE_SUCCESS",
    "NOTIFICATION_TYPE_WARNING",
    "NOTIFICATION_TYPE_ERROR",
    "NOTIFICATION_TYPES",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_HIGH",
    "NOTIFICATION_PRIORITIES",
    "InvalidNotificationPayload",
    "NotificationPayload",
    "NotificationRecord",
    "NotificationFilter",
    "Pagination",
    "NotificationPage",
    "FanOutResult",
    "CleanupResult",
]
