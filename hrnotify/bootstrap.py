"""Wire the notification components together."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from hrnotify.application.use_cases.notifications import (
    NotificationOrchestrator,
    SecondaryChannelDispatcher,
)
from hrnotify.config import Settings
from hrnotify.domain.ports import MailSender, NotificationStore, UserDirectory
from hrnotify.infrastructure.email import send_email
from hrnotify.infrastructure.notifications import ConnectionRegistry, ConnectionSweeper
from hrnotify.infrastructure.repositories import NotificationRepository, UserRepository


@dataclass
class NotificationServices:
    registry: ConnectionRegistry
    sweeper: ConnectionSweeper
    orchestrator: NotificationOrchestrator


def build_notification_services(
    settings: Settings,
    session_factory: sessionmaker[Session] | None = None,
    *,
    store: NotificationStore | None = None,
    directory: UserDirectory | None = None,
    mail_sender: MailSender | None = None,
) -> NotificationServices:
    """Create the registry, sweeper and orchestrator for one application instance."""

    if store is None or directory is None:
        if session_factory is None:
            raise ValueError("session_factory is required when store or directory is omitted")
        store = store or NotificationRepository(session_factory)
        directory = directory or UserRepository(session_factory)

    registry = ConnectionRegistry(
        write_timeout=settings.push_write_timeout_seconds,
        ack_timeout=settings.connection_ack_timeout_seconds,
    )
    sweeper = ConnectionSweeper(
        registry,
        interval=settings.sweep_interval_seconds,
        idle_timeout=settings.idle_timeout_seconds,
        heartbeat_interval=settings.heartbeat_interval_seconds,
    )
    secondary = None
    if settings.secondary_channel_enabled:
        secondary = SecondaryChannelDispatcher(directory, mail_sender or send_email)
    orchestrator = NotificationOrchestrator(store, directory, registry, secondary)
    return NotificationServices(registry=registry, sweeper=sweeper, orchestrator=orchestrator)


__all__ = ["NotificationServices", "build_notification_services"]
