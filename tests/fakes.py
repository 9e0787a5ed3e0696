"""In-memory stand-ins for the store, directory, mail sender and transports."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

from hrnotify.domain.entities import DirectoryUser, NotificationFilter, NotificationRecord
from hrnotify.infrastructure.notifications import is_reserved_frame
from hrnotify.utils import days_ago


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeTransport:
    """Push transport that records frames and can be told to fail or stall."""

    def __init__(
        self,
        *,
        fail: bool = False,
        fail_after: int | None = None,
        delay: float | None = None,
    ) -> None:
        self.frames: list[dict[str, Any]] = []
        self.fail = fail
        self.fail_after = fail_after
        self.delay = delay
        self.closed = False
        self.close_calls = 0

    @property
    def is_closed(self) -> bool:
        return self.closed

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.closed:
            raise ConnectionError("transport closed")
        if self.fail or (self.fail_after is not None and len(self.frames) >= self.fail_after):
            raise ConnectionResetError("peer went away")
        self.frames.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed = True
        self.close_calls += 1

    def notification_frames(self) -> list[dict[str, Any]]:
        return [frame for frame in self.frames if not is_reserved_frame(frame)]

    def frames_of_type(self, frame_type: str) -> list[dict[str, Any]]:
        return [frame for frame in self.frames if frame.get("type") == frame_type]


class InMemoryNotificationStore:
    """Thread-safe dictionary implementation of the notification store."""

    def __init__(self) -> None:
        self.records: dict[int, NotificationRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.fail_writes = False

    def create(self, record: NotificationRecord) -> NotificationRecord:
        return self.create_many([record])[0]

    def create_many(self, records: Sequence[NotificationRecord]) -> list[NotificationRecord]:
        if self.fail_writes:
            raise RuntimeError("store unavailable")
        saved = []
        with self._lock:
            for record in records:
                stored = replace(record, id=self._next_id)
                self.records[stored.id] = stored
                self._next_id += 1
                saved.append(replace(stored))
        return saved

    def for_recipient(self, recipient_id: int) -> list[NotificationRecord]:
        return [record for record in self.records.values() if record.recipient_id == recipient_id]

    def find_paged(
        self, recipient_id: int, filters: NotificationFilter
    ) -> tuple[list[NotificationRecord], int]:
        matches = [
            record
            for record in self.for_recipient(recipient_id)
            if (filters.is_read is None or record.is_read == filters.is_read)
            and (not filters.category or record.category == filters.category)
            and (not filters.type or record.type == filters.type)
        ]
        matches.sort(key=lambda record: (record.created_at, record.id), reverse=True)
        page = matches[filters.offset : filters.offset + filters.page_size]
        return [replace(record) for record in page], len(matches)

    def count_unread(self, recipient_id: int) -> int:
        return sum(1 for record in self.for_recipient(recipient_id) if not record.is_read)

    def update_read_flag(
        self, recipient_id: int, notification_ids: Iterable[int] | None = None
    ) -> int:
        wanted = set(notification_ids) if notification_ids is not None else None
        updated = 0
        with self._lock:
            for record in self.records.values():
                if record.recipient_id != recipient_id or record.is_read:
                    continue
                if wanted is not None and record.id not in wanted:
                    continue
                record.is_read = True
                updated += 1
        return updated

    def delete(self, notification_id: int, recipient_id: int) -> bool:
        with self._lock:
            record = self.records.get(notification_id)
            if record is None or record.recipient_id != recipient_id:
                return False
            del self.records[notification_id]
            return True

    def delete_older_than_read(self, days: int) -> int:
        cutoff = days_ago(days)
        with self._lock:
            stale = [
                record_id
                for record_id, record in self.records.items()
                if record.is_read and record.created_at < cutoff
            ]
            for record_id in stale:
                del self.records[record_id]
        return len(stale)


class FakeDirectory:
    """User directory backed by a dictionary."""

    def __init__(self, users: Iterable[DirectoryUser] = ()) -> None:
        self.users: dict[int, DirectoryUser] = {user.id: user for user in users}
        self.extra_roles: dict[str, list[int]] = {}

    def grant(self, user_id: int, role: str) -> None:
        """List ``user_id`` as a member of ``role`` in addition to its own role."""

        self.extra_roles.setdefault(role.lower(), []).append(user_id)

    def add(self, user_id: int, role: str, *, email: str | None = "", name: str | None = None) -> DirectoryUser:
        user = DirectoryUser(
            id=user_id,
            role=role,
            name=name or f"User {user_id}",
            email=f"user{user_id}@example.com" if email == "" else email,
        )
        self.users[user_id] = user
        return user

    def members_of_role(self, role: str) -> list[DirectoryUser]:
        members = [user for user in self.users.values() if user.has_role(role) and user.is_active]
        members.extend(self.users[user_id] for user_id in self.extra_roles.get(role.lower(), []))
        return members

    def get(self, user_id: int) -> DirectoryUser | None:
        return self.users.get(user_id)


class RecordingMailSender:
    """Callable mail sender that records every message."""

    def __init__(self, *, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.sent: list[tuple[str, str, str]] = []

    def __call__(self, subject: str, html_content: str, recipient: str) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append((subject, html_content, recipient))
        return self.result
