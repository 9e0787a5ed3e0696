"""Registry of live push connections indexed by user and by role."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from hrnotify.utils import utc_now

from .frames import connection_frame
from .transport import PushTransport

logger = logging.getLogger(__name__)


class WriteResult(enum.Enum):
    """Outcome of a single frame write."""

    OK = "ok"
    FAILED = "failed"


@dataclass(eq=False)
class ConnectionEntry:
    """A registered push connection; owns its transport."""

    user_id: int
    role: str
    transport: PushTransport
    connected_at: datetime
    last_active_at: datetime


@dataclass(frozen=True)
class RegistryStats:
    total: int
    per_role: dict[str, int] = field(default_factory=dict)


class ConnectionRegistry:
    """Own the set of live push connections.

    A user has at most one entry; a newer connection replaces the older one.
    Each entry also lives in exactly one role bucket, keyed case-insensitively
    like the user directory resolves roles. Both indices are only mutated
    while holding ``_lock``, and the lock is never held across a network
    write. Transport errors never reach callers: a failed write tears
    the connection down and is reported through the return value.
    """

    def __init__(
        self,
        *,
        write_timeout: float = 5.0,
        ack_timeout: float = 5.0,
        close_timeout: float = 2.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._write_timeout = write_timeout
        self._ack_timeout = ack_timeout
        self._close_timeout = close_timeout
        self._clock = clock
        self._by_user: dict[int, ConnectionEntry] = {}
        self._by_role: dict[str, dict[int, ConnectionEntry]] = {}
        self._lock = asyncio.Lock()

    async def register(self, user_id: int, role: str, transport: PushTransport) -> bool:
        """Install ``transport`` as the connection for ``user_id``.

        Returns ``False`` when the connection acknowledgement could not be
        written, in which case the new entry has already been removed again.
        """

        now = self._clock()
        entry = ConnectionEntry(
            user_id=user_id,
            role=role,
            transport=transport,
            connected_at=now,
            last_active_at=now,
        )
        async with self._lock:
            previous = self._remove_locked(user_id)
            self._by_user[user_id] = entry
            self._by_role.setdefault(_role_key(role), {})[user_id] = entry

        if previous is not None:
            logger.info("Replacing existing push connection for user %s", user_id)
            await self._close_transport(previous)

        result = await self._safe_write(entry, connection_frame(now=now), timeout=self._ack_timeout)
        if result is WriteResult.OK:
            logger.info("Push connection registered for user %s with role %s", user_id, role)
        return result is WriteResult.OK

    async def deregister(self, user_id: int, transport: PushTransport | None = None) -> bool:
        """Remove the connection of ``user_id``; unknown users are ignored.

        When ``transport`` is provided the entry is only removed if it still
        owns that transport.
        """

        async with self._lock:
            current = self._by_user.get(user_id)
            if current is None or (transport is not None and current.transport is not transport):
                return False
            self._remove_locked(user_id)

        await self._close_transport(current)
        logger.info("Push connection removed for user %s", user_id)
        return True

    async def push_to_user(self, user_id: int, payload: dict[str, Any]) -> bool:
        entry = self._by_user.get(user_id)
        if entry is None:
            return False
        return await self._safe_write(entry, payload) is WriteResult.OK

    async def push_to_role(self, role: str, payload: dict[str, Any]) -> int:
        snapshot = list(self._by_role.get(_role_key(role), {}).values())
        return await self._fan_out(snapshot, payload)

    async def push_to_roles(self, roles: Iterable[str], payload: dict[str, Any]) -> int:
        delivered = 0
        for role in dict.fromkeys(_role_key(role) for role in roles):
            delivered += await self.push_to_role(role, payload)
        return delivered

    async def broadcast(self, payload: dict[str, Any]) -> int:
        return await self._fan_out(list(self._by_user.values()), payload)

    def touch(self, user_id: int) -> bool:
        """Refresh the liveness timestamp after an explicit client heartbeat."""

        entry = self._by_user.get(user_id)
        if entry is None:
            return False
        entry.last_active_at = self._clock()
        return True

    def is_connected(self, user_id: int) -> bool:
        return user_id in self._by_user

    def get_entry(self, user_id: int) -> ConnectionEntry | None:
        return self._by_user.get(user_id)

    def entries(self) -> list[ConnectionEntry]:
        return list(self._by_user.values())

    def role_members(self, role: str) -> set[int]:
        return set(self._by_role.get(_role_key(role), {}))

    def roles(self) -> list[str]:
        return list(self._by_role)

    def stats(self) -> RegistryStats:
        return RegistryStats(
            total=len(self._by_user),
            per_role={role: len(bucket) for role, bucket in self._by_role.items()},
        )

    async def sweep(self, idle_timeout: float | timedelta) -> int:
        """Evict entries idle for longer than ``idle_timeout`` or already closed."""

        if not isinstance(idle_timeout, timedelta):
            idle_timeout = timedelta(seconds=idle_timeout)
        now = self._clock()
        stale = [
            entry
            for entry in list(self._by_user.values())
            if entry.transport.is_closed or now - entry.last_active_at > idle_timeout
        ]
        for entry in stale:
            logger.info(
                "Evicting idle push connection for user %s (last active %s)",
                entry.user_id,
                entry.last_active_at.isoformat(),
            )
            await self._teardown(entry)
        return len(stale)

    async def close_all(self) -> None:
        async with self._lock:
            entries = list(self._by_user.values())
            self._by_user.clear()
            self._by_role.clear()
        for entry in entries:
            await self._close_transport(entry)

    async def _fan_out(self, entries: list[ConnectionEntry], payload: dict[str, Any]) -> int:
        if not entries:
            return 0
        results = await asyncio.gather(
            *(self._safe_write(entry, dict(payload)) for entry in entries)
        )
        return sum(1 for result in results if result is WriteResult.OK)

    async def _safe_write(
        self,
        entry: ConnectionEntry,
        payload: dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> WriteResult:
        """Write ``payload`` to ``entry``; tear the entry down on any failure."""

        if entry.transport.is_closed:
            await self._teardown(entry)
            return WriteResult.FAILED
        try:
            await asyncio.wait_for(
                entry.transport.send_json(payload),
                timeout=timeout if timeout is not None else self._write_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Push to user %s timed out; dropping connection", entry.user_id)
            await self._teardown(entry)
            return WriteResult.FAILED
        except Exception as exc:
            logger.warning(
                "Push to user %s failed (%s); dropping connection", entry.user_id, exc
            )
            await self._teardown(entry)
            return WriteResult.FAILED
        entry.last_active_at = self._clock()
        return WriteResult.OK

    async def _teardown(self, entry: ConnectionEntry) -> None:
        async with self._lock:
            self._remove_locked(entry.user_id, expected=entry)
        await self._close_transport(entry)

    async def _close_transport(self, entry: ConnectionEntry) -> None:
        try:
            await asyncio.wait_for(entry.transport.close(), timeout=self._close_timeout)
        except Exception as exc:
            logger.debug("Ignoring error while closing transport for user %s: %s", entry.user_id, exc)

    def _remove_locked(
        self, user_id: int, *, expected: ConnectionEntry | None = None
    ) -> ConnectionEntry | None:
        entry = self._by_user.get(user_id)
        if entry is None or (expected is not None and entry is not expected):
            return None
        del self._by_user[user_id]
        key = _role_key(entry.role)
        bucket = self._by_role.get(key)
        if bucket is not None:
            bucket.pop(user_id, None)
            if not bucket:
                del self._by_role[key]
        return entry


def _role_key(role: str) -> str:
    return role.casefold()


__all__ = ["ConnectionEntry", "ConnectionRegistry", "RegistryStats", "WriteResult"]
