"""Interfaces the notification core depends on.

The delivery code only talks to persistence, the user directory and the
outbound mail sender through these protocols, so tests can substitute
in-memory fakes for the SQLAlchemy and SendGrid implementations.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from hrnotify.domain.entities import (
    DirectoryUser,
    NotificationFilter,
    NotificationRecord,
)


class NotificationStore(Protocol):
    """Persistence operations for :class:`NotificationRecord` objects."""

    def create(self, record: NotificationRecord) -> NotificationRecord: ...

    def create_many(
        self, records: Sequence[NotificationRecord]
    ) -> list[NotificationRecord]: ...

    def find_paged(
        self, recipient_id: int, filters: NotificationFilter
    ) -> tuple[list[NotificationRecord], int]: ...

    def count_unread(self, recipient_id: int) -> int: ...

    def update_read_flag(
        self, recipient_id: int, notification_ids: Iterable[int] | None = None
    ) -> int: ...

    def delete(self, notification_id: int, recipient_id: int) -> bool: ...

    def delete_older_than_read(self, days: int) -> int: ...


class UserDirectory(Protocol):
    """Lookup of role membership and contact details."""

    def members_of_role(self, role: str) -> Sequence[DirectoryUser]: ...

    def get(self, user_id: int) -> DirectoryUser | None: ...


class MailSender(Protocol):
    """Outbound email transport used by the secondary channel."""

    def __call__(self, subject: str, html_content: str, recipient: str) -> bool: ...


__all__ = ["NotificationStore", "UserDirectory", "MailSender"]
