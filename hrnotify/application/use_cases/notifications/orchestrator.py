"""Public delivery API: persist notifications, push them, escalate by email."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from anyio import to_thread

from hrnotify.domain.entities import (
    CleanupResult,
    DirectoryUser,
    FanOutResult,
    NotificationFilter,
    NotificationPage,
    NotificationPayload,
    NotificationRecord,
    Pagination,
)
from hrnotify.domain.ports import NotificationStore, UserDirectory
from hrnotify.infrastructure.notifications import (
    ConnectionRegistry,
    payload_frame,
    serialize_notification,
)
from hrnotify.utils import utc_now

from .escalation import should_escalate
from .secondary_channel import SecondaryChannelDispatcher

logger = logging.getLogger(__name__)


class NotificationOrchestrator:
    """Coordinate the durable record, the live push and the email channel.

    The record is always written first and a store failure propagates to the
    caller. Push and email are best effort: their outcome never changes the
    return value of a ``notify_*`` call.
    """

    def __init__(
        self,
        store: NotificationStore,
        directory: UserDirectory,
        registry: ConnectionRegistry,
        secondary: SecondaryChannelDispatcher | None = None,
        *,
        escalate: Callable[[NotificationPayload], bool] = should_escalate,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._directory = directory
        self._registry = registry
        self._secondary = secondary
        self._escalate = escalate
        self._clock = clock
        self._background: set[asyncio.Task[Any]] = set()

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    async def notify_user(
        self,
        user_id: int,
        payload: NotificationPayload,
        *,
        email_context: Mapping[str, Any] | None = None,
    ) -> NotificationRecord:
        """Persist a notification for ``user_id`` and try to push it."""

        payload.validate()
        record = NotificationRecord.from_payload(user_id, payload, created_at=self._clock())
        saved = await to_thread.run_sync(self._store.create, record)
        pushed = await self._registry.push_to_user(user_id, serialize_notification(saved))
        logger.info(
            "Notification %s created for user %s (%s/%s, pushed=%s)",
            saved.id,
            user_id,
            payload.category,
            payload.type,
            pushed,
        )
        self._schedule_escalation([user_id], payload, email_context)
        return saved

    async def notify_role(
        self,
        role: str,
        payload: NotificationPayload,
        *,
        email_context: Mapping[str, Any] | None = None,
    ) -> FanOutResult:
        """Persist one record per current member of ``role`` and push once to the role."""

        payload.validate()
        members = await to_thread.run_sync(self._directory.members_of_role, role)
        return await self._notify_members(role, members, payload, email_context)

    async def notify_roles(
        self,
        roles: Iterable[str],
        payload: NotificationPayload,
        *,
        dedupe: bool = False,
        email_context: Mapping[str, Any] | None = None,
    ) -> FanOutResult:
        """Notify every role in ``roles``.

        A user holding several of the listed roles receives one record per
        matching role unless ``dedupe`` is set.
        """

        payload.validate()
        result = FanOutResult()
        role_list = list(dict.fromkeys(roles)) if dedupe else list(roles)
        seen: set[int] = set()
        for role in role_list:
            members = await to_thread.run_sync(self._directory.members_of_role, role)
            if dedupe:
                members = [member for member in members if member.id not in seen]
                seen.update(member.id for member in members)
            result.extend(await self._notify_members(role, members, payload, email_context))
        return result

    async def broadcast(self, payload: NotificationPayload) -> int:
        """Push ``payload`` to every live connection without persisting it."""

        payload.validate()
        delivered = await self._registry.broadcast(payload_frame(payload, created_at=self._clock()))
        logger.info("Broadcast '%s' delivered to %s connections", payload.title, delivered)
        return delivered

    async def list_for_user(
        self, user_id: int, filters: NotificationFilter | None = None
    ) -> NotificationPage:
        filters = filters or NotificationFilter()
        items, total = await to_thread.run_sync(self._store.find_paged, user_id, filters)
        unread = await to_thread.run_sync(self._store.count_unread, user_id)
        return NotificationPage(
            items=items,
            pagination=Pagination(page=filters.page, page_size=filters.page_size, total=total),
            unread_count=unread,
        )

    async def unread_count(self, user_id: int) -> int:
        return await to_thread.run_sync(self._store.count_unread, user_id)

    async def mark_read(self, notification_id: int, user_id: int) -> bool:
        """Mark one notification as read; ``False`` if ``user_id`` has no such unread record."""

        updated = await to_thread.run_sync(
            self._store.update_read_flag, user_id, [notification_id]
        )
        return updated > 0

    async def mark_many_read(self, notification_ids: Iterable[int], user_id: int) -> int:
        ids = list(dict.fromkeys(notification_ids))
        if not ids:
            return 0
        updated = await to_thread.run_sync(self._store.update_read_flag, user_id, ids)
        logger.info("Marked %s notifications as read for user %s", updated, user_id)
        return updated

    async def mark_all_read(self, user_id: int) -> int:
        updated = await to_thread.run_sync(self._store.update_read_flag, user_id, None)
        logger.info("Marked all %s unread notifications as read for user %s", updated, user_id)
        return updated

    async def delete(self, notification_id: int, user_id: int) -> bool:
        deleted = await to_thread.run_sync(self._store.delete, notification_id, user_id)
        if deleted:
            logger.info("Notification %s deleted for user %s", notification_id, user_id)
        return deleted

    async def cleanup(self, older_than_days: int = 30) -> CleanupResult:
        """Delete read notifications older than ``older_than_days`` days."""

        if older_than_days < 0:
            raise ValueError("older_than_days must not be negative")
        deleted = await to_thread.run_sync(self._store.delete_older_than_read, older_than_days)
        logger.info("Cleaned up %s old notifications", deleted)
        return CleanupResult(deleted_count=deleted)

    async def wait_for_background(self) -> None:
        """Wait until every scheduled secondary-channel delivery has finished."""

        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _notify_members(
        self,
        role: str,
        members: Sequence[DirectoryUser],
        payload: NotificationPayload,
        email_context: Mapping[str, Any] | None,
    ) -> FanOutResult:
        if not members:
            logger.info("No members with role %s to notify", role)
            return FanOutResult()

        created_at = self._clock()
        records = [
            NotificationRecord.from_payload(member.id, payload, created_at=created_at)
            for member in members
        ]
        saved = await to_thread.run_sync(self._store.create_many, records)
        pushed = await self._registry.push_to_role(
            role, payload_frame(payload, created_at=created_at, role=role)
        )
        logger.info(
            "Role %s notified: %s records persisted, %s live pushes", role, len(saved), pushed
        )
        self._schedule_escalation([record.recipient_id for record in saved], payload, email_context)
        return FanOutResult(records=list(saved), pushed=pushed)

    def _schedule_escalation(
        self,
        user_ids: Sequence[int],
        payload: NotificationPayload,
        email_context: Mapping[str, Any] | None,
    ) -> None:
        if self._secondary is None or not self._escalate(payload):
            return
        loop = asyncio.get_running_loop()
        for user_id in user_ids:
            task = loop.create_task(self._secondary.dispatch(user_id, payload, email_context))
            self._background.add(task)
            task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Secondary channel task failed", exc_info=exc)


__all__ = ["NotificationOrchestrator"]
