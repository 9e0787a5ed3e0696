"""Builders for the JSON frames written to push connections."""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Any

from hrnotify.domain.entities import NotificationPayload, NotificationRecord
from hrnotify.utils import isoformat_utc, utc_now

FRAME_TYPE_CONNECTION = "connection"
FRAME_TYPE_HEARTBEAT = "heartbeat"

RESERVED_FRAME_TYPES = frozenset({FRAME_TYPE_CONNECTION, FRAME_TYPE_HEARTBEAT})


def serialize_notification(record: NotificationRecord) -> dict[str, Any]:
    """Return the push frame representation for a persisted ``record``."""

    return {
        "id": record.id,
        "title": record.title,
        "message": record.message,
        "type": record.type,
        "category": record.category,
        "metadata": copy.deepcopy(record.metadata) if record.metadata is not None else None,
        "priority": record.priority,
        "actionUrl": record.action_url,
        "createdAt": isoformat_utc(record.created_at),
        "isRead": record.is_read,
    }


def payload_frame(
    payload: NotificationPayload,
    *,
    created_at: datetime | None = None,
    role: str | None = None,
) -> dict[str, Any]:
    """Return a frame for content that is not tied to a single persisted record.

    Role fan-out and broadcasts push one shared frame to many connections, so
    the frame carries no record id.
    """

    frame: dict[str, Any] = {
        "id": None,
        "title": payload.title,
        "message": payload.message,
        "type": payload.type,
        "category": payload.category,
        "metadata": copy.deepcopy(payload.metadata) if payload.metadata is not None else None,
        "priority": payload.effective_priority(),
        "actionUrl": payload.action_url,
        "createdAt": isoformat_utc(created_at or utc_now()),
        "isRead": False,
    }
    if role is not None:
        frame["role"] = role
    return frame


def connection_frame(*, now: datetime | None = None) -> dict[str, Any]:
    return {
        "type": FRAME_TYPE_CONNECTION,
        "message": "Connected to notification stream",
        "timestamp": isoformat_utc(now or utc_now()),
    }


def heartbeat_frame(*, now: datetime | None = None) -> dict[str, Any]:
    return {"type": FRAME_TYPE_HEARTBEAT, "timestamp": isoformat_utc(now or utc_now())}


def is_reserved_frame(frame: dict[str, Any]) -> bool:
    """Return ``True`` for connection and heartbeat control frames."""

    return frame.get("type") in RESERVED_FRAME_TYPES and "title" not in frame


__all__ = [
    "FRAME_TYPE_CONNECTION",
    "FRAME_TYPE_HEARTBEAT",
    "RESERVED_FRAME_TYPES",
    "serialize_notification",
    "payload_frame",
    "connection_frame",
    "heartbeat_frame",
    "is_reserved_frame",
]
