"""Out-of-band email delivery for escalated notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from anyio import to_thread

from hrnotify.domain.entities import NotificationPayload
from hrnotify.domain.ports import MailSender, UserDirectory

from .templates import render_email

logger = logging.getLogger(__name__)


class SecondaryChannelDispatcher:
    """Best-effort email delivery; every failure is logged and swallowed."""

    def __init__(self, directory: UserDirectory, sender: MailSender) -> None:
        self._directory = directory
        self._sender = sender

    async def dispatch(
        self,
        user_id: int,
        payload: NotificationPayload,
        extra: Mapping[str, Any] | None = None,
    ) -> bool:
        """Attempt to email ``payload`` to ``user_id``; never raises."""

        try:
            user = await to_thread.run_sync(self._directory.get, user_id)
        except Exception:
            logger.exception("Could not resolve contact details for user %s", user_id)
            return False

        if user is None or not user.email:
            logger.info("No email address for user %s; skipping secondary channel", user_id)
            return False

        try:
            email = render_email(user, payload, extra)
        except (KeyError, ValueError, IndexError) as exc:
            logger.warning(
                "Could not render %s email for user %s: %r", payload.category, user_id, exc
            )
            return False

        try:
            sent = await to_thread.run_sync(
                self._sender, email.subject, email.html_content, user.email
            )
        except Exception:
            logger.exception("Email delivery to user %s failed", user_id)
            return False

        if not sent:
            logger.warning("Email delivery to user %s was not accepted", user_id)
            return False
        logger.info("Escalated %s notification emailed to user %s", payload.category, user_id)
        return True


__all__ = ["SecondaryChannelDispatcher"]
