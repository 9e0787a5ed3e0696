"""Tests for the periodic idle-connection sweeper."""

from __future__ import annotations

import asyncio

import pytest

from fakes import FakeTransport
from hrnotify.infrastructure.notifications import (
    FRAME_TYPE_HEARTBEAT,
    ConnectionRegistry,
    ConnectionSweeper,
)

pytestmark = pytest.mark.anyio


async def test_run_once_evicts_idle_connection(registry, clock):
    sweeper = ConnectionSweeper(registry, interval=30, idle_timeout=300)
    transport = FakeTransport()
    await registry.register(1, "employee", transport)

    clock.advance(301)
    evicted = await sweeper.run_once()

    assert evicted == 1
    assert await registry.push_to_user(1, {"title": "after sweep"}) is False


async def test_start_and_stop_manage_background_task(registry):
    sweeper = ConnectionSweeper(registry, interval=0.01, idle_timeout=300)

    sweeper.start()
    assert sweeper.is_running is True
    await asyncio.sleep(0.05)
    await sweeper.stop()

    assert sweeper.is_running is False


async def test_periodic_sweep_runs_without_manual_trigger():
    registry = ConnectionRegistry(write_timeout=0.2, ack_timeout=0.2)
    sweeper = ConnectionSweeper(registry, interval=0.01, idle_timeout=0.02)
    await registry.register(1, "employee", FakeTransport())

    sweeper.start()
    try:
        for _ in range(100):
            if not registry.is_connected(1):
                break
            await asyncio.sleep(0.01)
    finally:
        await sweeper.stop()

    assert not registry.is_connected(1)


async def test_heartbeat_goes_through_push_path(registry):
    sweeper = ConnectionSweeper(registry, interval=30, idle_timeout=300, heartbeat_interval=30)
    healthy = FakeTransport()
    dead = FakeTransport(fail_after=1)
    await registry.register(1, "employee", healthy)
    await registry.register(2, "employee", dead)

    delivered = await sweeper.send_heartbeats()

    assert delivered == 1
    assert len(healthy.frames_of_type(FRAME_TYPE_HEARTBEAT)) == 1
    assert not registry.is_connected(2)
    assert dead.closed is True
