"""Send notification emails through SendGrid."""

from __future__ import annotations

import json
import logging
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from hrnotify.config import get_settings

logger = logging.getLogger(__name__)


def describe_sendgrid_error(body: Any) -> str | None:
    """Return a readable description of a SendGrid error payload."""

    if body in (None, "", b""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    parsed: Any = body
    if isinstance(body, str):
        text = body.strip()
        if not text:
            return None
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            return text

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages = []
            for item in errors:
                if not isinstance(item, dict) or not item.get("message"):
                    continue
                field_name = item.get("field")
                message = str(item["message"])
                messages.append(f"{field_name}: {message}" if field_name else message)
            if messages:
                return "; ".join(messages)
        return json.dumps(parsed, default=str)

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _log_failure(status_code: Any, body: Any) -> None:
    details = describe_sendgrid_error(body)
    if status_code and details:
        logger.error("SendGrid request failed with status %s: %s", status_code, details)
    elif status_code:
        logger.error("SendGrid request failed with status %s", status_code)
    elif details:
        logger.error("SendGrid request failed: %s", details)
    else:
        logger.error("SendGrid request failed without details")


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send an email with the configured SendGrid credentials.

    Returns ``False`` instead of raising when the sender is not configured or
    SendGrid rejects the message.
    """

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email to %s", recipient)
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        response = SendGridAPIClient(settings.sendgrid_api_key).send(message)
    except Exception as exc:  # pragma: no cover - network failures depend on environment
        _log_failure(getattr(exc, "status_code", None), getattr(exc, "body", None))
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_failure(status_code, getattr(response, "body", None))
        return False

    logger.debug("SendGrid accepted email '%s' for %s", subject, recipient)
    return True


__all__ = ["describe_sendgrid_error", "send_email"]
