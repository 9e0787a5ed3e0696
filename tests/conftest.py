"""Shared fixtures for the notification service tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

from fakes import (  # noqa: E402
    FakeClock,
    FakeDirectory,
    InMemoryNotificationStore,
    RecordingMailSender,
)
from hrnotify.infrastructure.notifications import ConnectionRegistry  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> ConnectionRegistry:
    return ConnectionRegistry(write_timeout=0.2, ack_timeout=0.2, close_timeout=0.2, clock=clock)


@pytest.fixture
def store() -> InMemoryNotificationStore:
    return InMemoryNotificationStore()


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def mail_sender() -> RecordingMailSender:
    return RecordingMailSender()
