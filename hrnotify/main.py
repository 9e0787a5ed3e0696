"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hrnotify.bootstrap import NotificationServices, build_notification_services
from hrnotify.config import Settings, configure_logging, get_settings
from hrnotify.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    services: NotificationServices | None = None,
) -> FastAPI:
    """Create and configure the notification service application.

    ``services`` lets callers supply pre-built components (for example with
    in-memory stores); otherwise they are built on top of the configured
    database.
    """

    settings = settings or get_settings()
    configure_logging(settings)
    manage_database = services is None

    if services is None:
        from hrnotify.infrastructure.database import SessionLocal

        services = build_notification_services(settings, SessionLocal)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the connection sweeper and release resources on shutdown."""

        if manage_database:
            from hrnotify.infrastructure.database import initialize_database

            initialize_database()
        services.sweeper.start()
        try:
            yield
        finally:
            await services.sweeper.stop()
            await services.orchestrator.wait_for_background()
            await services.registry.close_all()
            if manage_database:
                from hrnotify.infrastructure.database import engine

                engine.dispose()
            logger.info("Notification service shut down")

    app = FastAPI(title="HR notification service", lifespan=lifespan)
    app.state.notifications = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


__all__ = ["create_app"]
