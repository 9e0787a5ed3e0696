"""Delete read notifications older than the retention period.

Meant to be run by an external scheduler (cron, a Kubernetes CronJob, ...).
"""

from __future__ import annotations

import argparse
import logging

import anyio
from sqlalchemy.exc import SQLAlchemyError

from hrnotify.bootstrap import build_notification_services
from hrnotify.config import configure_logging, get_settings
from hrnotify.infrastructure.database import SessionLocal, initialize_database

logger = logging.getLogger("hrnotify.cleanup")


def parse_args(default_days: int) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Remove read notifications older than the retention period.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=default_days,
        help=f"Retention period in days (default: {default_days})",
    )
    return parser.parse_args()


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    args = parse_args(settings.notification_retention_days)
    if args.days < 0:
        raise SystemExit("--days must not be negative")

    initialize_database()
    services = build_notification_services(settings, SessionLocal)

    try:
        result = anyio.run(services.orchestrator.cleanup, args.days)
    except SQLAlchemyError as exc:
        raise SystemExit(f"Cleanup failed: {exc}") from exc

    print(f"Deleted {result.deleted_count} notifications")


if __name__ == "__main__":
    main()
