"""Recurring task that evicts idle push connections and sends keep-alives."""

from __future__ import annotations

import asyncio
import logging

from .frames import heartbeat_frame
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class ConnectionSweeper:
    """Run :meth:`ConnectionRegistry.sweep` on a fixed period.

    When ``heartbeat_interval`` is positive a heartbeat frame is also
    broadcast through the registry, so a client that stopped reading is torn
    down by the regular write-failure path.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        interval: float = 30.0,
        idle_timeout: float = 300.0,
        heartbeat_interval: float = 0.0,
    ) -> None:
        self._registry = registry
        self._interval = interval
        self._idle_timeout = idle_timeout
        self._heartbeat_interval = heartbeat_interval
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        if self.is_running:
            return
        loop = asyncio.get_running_loop()
        self._tasks = [loop.create_task(self._sweep_loop(), name="connection-sweep")]
        if self._heartbeat_interval > 0:
            self._tasks.append(
                loop.create_task(self._heartbeat_loop(), name="connection-heartbeat")
            )
        logger.info(
            "Connection sweeper started (interval=%ss, idle_timeout=%ss)",
            self._interval,
            self._idle_timeout,
        )

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if tasks:
            logger.info("Connection sweeper stopped")

    async def run_once(self) -> int:
        """Perform a single sweep and return the number of evicted connections."""

        evicted = await self._registry.sweep(self._idle_timeout)
        if evicted:
            logger.info("Sweep evicted %s push connections", evicted)
        return evicted

    async def send_heartbeats(self) -> int:
        return await self._registry.broadcast(heartbeat_frame())

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.run_once()
            except Exception:
                logger.exception("Connection sweep failed")

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self._heartbeat_interval)
            try:
                await self.send_heartbeats()
            except Exception:
                logger.exception("Heartbeat broadcast failed")


__all__ = ["ConnectionSweeper"]
