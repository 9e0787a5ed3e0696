"""Decide which notifications are also delivered out of band."""

from __future__ import annotations

from hrnotify.domain.entities import (
    NOTIFICATION_TYPE_ERROR,
    NOTIFICATION_TYPE_SUCCESS,
    NOTIFICATION_TYPE_WARNING,
    NotificationPayload,
)

IMPORTANT_CATEGORIES = frozenset({"attendance", "leave", "account", "payroll", "system"})
ESCALATED_TYPES = frozenset(
    {NOTIFICATION_TYPE_ERROR, NOTIFICATION_TYPE_WARNING, NOTIFICATION_TYPE_SUCCESS}
)


def should_escalate(payload: NotificationPayload) -> bool:
    """Return ``True`` when ``payload`` should also go through the secondary channel."""

    return payload.category in IMPORTANT_CATEGORIES or payload.type in ESCALATED_TYPES


__all__ = ["IMPORTANT_CATEGORIES", "ESCALATED_TYPES", "should_escalate"]
