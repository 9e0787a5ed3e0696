"""Persistence helpers for notification records."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, sessionmaker

from hrnotify.domain.entities import NotificationFilter, NotificationRecord
from hrnotify.infrastructure.models import NotificationModel
from hrnotify.utils import days_ago, ensure_naive_utc, ensure_utc, utc_now

logger = logging.getLogger(__name__)


class NotificationRepository:
    """SQLAlchemy implementation of the notification store.

    Every operation opens its own short-lived session so the repository can be
    called from worker threads.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def create(self, record: NotificationRecord) -> NotificationRecord:
        return self.create_many([record])[0]

    def create_many(
        self, records: Sequence[NotificationRecord]
    ) -> list[NotificationRecord]:
        if not records:
            return []
        with self._session_factory() as session:
            models = []
            for record in records:
                model = NotificationModel()
                self._apply_entity_to_model(model, record)
                models.append(model)
            session.add_all(models)
            session.commit()
            return [self._to_entity(model) for model in models]

    def get(self, notification_id: int) -> NotificationRecord | None:
        with self._session_factory() as session:
            model = session.get(NotificationModel, notification_id)
            return self._to_entity(model) if model else None

    def find_paged(
        self, recipient_id: int, filters: NotificationFilter
    ) -> tuple[list[NotificationRecord], int]:
        conditions = [NotificationModel.recipient_id == recipient_id]
        if filters.is_read is not None:
            conditions.append(NotificationModel.is_read.is_(filters.is_read))
        if filters.category:
            conditions.append(NotificationModel.category == filters.category)
        if filters.type:
            conditions.append(NotificationModel.type == filters.type)

        with self._session_factory() as session:
            total = session.scalar(
                select(func.count()).select_from(NotificationModel).where(*conditions)
            )
            query = (
                select(NotificationModel)
                .where(*conditions)
                .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
                .offset(filters.offset)
                .limit(filters.page_size)
            )
            items = [self._to_entity(model) for model in session.scalars(query)]
        return items, int(total or 0)

    def count_unread(self, recipient_id: int) -> int:
        with self._session_factory() as session:
            total = session.scalar(
                select(func.count())
                .select_from(NotificationModel)
                .where(
                    NotificationModel.recipient_id == recipient_id,
                    NotificationModel.is_read.is_(False),
                )
            )
        return int(total or 0)

    def update_read_flag(
        self, recipient_id: int, notification_ids: Iterable[int] | None = None
    ) -> int:
        """Mark unread notifications owned by ``recipient_id`` as read.

        When ``notification_ids`` is ``None`` every unread notification of the
        recipient is updated. Returns the number of rows that changed.
        """

        statement = update(NotificationModel).where(
            NotificationModel.recipient_id == recipient_id,
            NotificationModel.is_read.is_(False),
        )
        if notification_ids is not None:
            ids = [notification_id for notification_id in notification_ids if notification_id is not None]
            if not ids:
                return 0
            statement = statement.where(NotificationModel.id.in_(ids))

        with self._session_factory() as session:
            result = session.execute(
                statement.values(is_read=True, read_at=ensure_naive_utc(utc_now())),
                execution_options={"synchronize_session": False},
            )
            session.commit()
        return int(result.rowcount or 0)

    def delete(self, notification_id: int, recipient_id: int) -> bool:
        with self._session_factory() as session:
            result = session.execute(
                delete(NotificationModel).where(
                    NotificationModel.id == notification_id,
                    NotificationModel.recipient_id == recipient_id,
                ),
                execution_options={"synchronize_session": False},
            )
            session.commit()
        return bool(result.rowcount)

    def delete_older_than_read(self, days: int) -> int:
        """Remove read notifications created more than ``days`` days ago."""

        cutoff = ensure_naive_utc(days_ago(days))
        with self._session_factory() as session:
            result = session.execute(
                delete(NotificationModel).where(
                    NotificationModel.is_read.is_(True),
                    NotificationModel.created_at < cutoff,
                ),
                execution_options={"synchronize_session": False},
            )
            session.commit()
        deleted = int(result.rowcount or 0)
        logger.info("Removed %s read notifications older than %s days", deleted, days)
        return deleted

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, record: NotificationRecord) -> None:
        model.created_at = ensure_naive_utc(record.created_at) or ensure_naive_utc(utc_now())
        model.recipient_id = record.recipient_id
        model.title = record.title
        model.message = record.message
        model.type = record.type
        model.category = record.category
        model.priority = record.priority
        model.action_url = record.action_url
        model.metadata_json = record.metadata
        model.is_read = record.is_read

    @staticmethod
    def _to_entity(model: NotificationModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            recipient_id=model.recipient_id,
            title=model.title,
            message=model.message,
            type=model.type,
            category=model.category,
            metadata=model.metadata_json,
            priority=model.priority,
            action_url=model.action_url,
            is_read=bool(model.is_read),
            created_at=ensure_utc(model.created_at),
        )


__all__ = ["NotificationRepository"]
