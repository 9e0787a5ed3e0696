"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from hrnotify.domain.entities import NotificationPage, NotificationRecord
from hrnotify.infrastructure.notifications import RegistryStats


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[int] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[int]:
        """Return the identifiers without duplicates, preserving order."""

        return list(dict.fromkeys(self.ids))


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    recipient_id: int
    title: str
    message: str
    type: Literal["info", "success", "warning", "error"]
    category: str
    metadata: dict[str, Any] | None = None
    priority: str
    action_url: str | None = None
    is_read: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, record: NotificationRecord) -> "NotificationRead":
        return cls(
            id=record.id or 0,
            recipient_id=record.recipient_id,
            title=record.title,
            message=record.message,
            type=record.type,
            category=record.category,
            metadata=record.metadata,
            priority=record.priority,
            action_url=record.action_url,
            is_read=record.is_read,
            created_at=record.created_at,
        )


class PaginationRead(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    has_more: bool


class NotificationListResponse(BaseModel):
    """A page of notifications for the authenticated user."""

    items: list[NotificationRead]
    pagination: PaginationRead
    unread_count: int

    @classmethod
    def from_page(cls, page: NotificationPage) -> "NotificationListResponse":
        pagination = page.pagination
        return cls(
            items=[NotificationRead.from_entity(item) for item in page.items],
            pagination=PaginationRead(
                page=pagination.page,
                page_size=pagination.page_size,
                total=pagination.total,
                total_pages=pagination.total_pages,
                has_more=pagination.has_more,
            ),
            unread_count=page.unread_count,
        )


class UnreadCountResponse(BaseModel):
    count: int


class UpdatedCountResponse(BaseModel):
    updated_count: int


class ConnectionStatsRead(BaseModel):
    """Snapshot of the live push connections."""

    total: int
    per_role: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_stats(cls, stats: RegistryStats) -> "ConnectionStatsRead":
        return cls(total=stats.total, per_role=dict(stats.per_role))


__all__ = [
    "NotificationMarkReadRequest",
    "NotificationRead",
    "PaginationRead",
    "NotificationListResponse",
    "UnreadCountResponse",
    "UpdatedCountResponse",
    "ConnectionStatsRead",
]
