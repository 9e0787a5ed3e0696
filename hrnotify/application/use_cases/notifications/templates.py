"""Email templates used by the secondary notification channel."""

from __future__ import annotations

import html
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from hrnotify.domain.entities import DirectoryUser, NotificationPayload


@dataclass(frozen=True)
class EmailTemplate:
    """Subject and HTML body with ``str.format`` placeholders."""

    subject: str
    body: str


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html_content: str


_FOOTER = "<p>You can review this and other notifications in the HR portal.</p>"

DEFAULT_TEMPLATE = EmailTemplate(
    subject="{title}",
    body="<p>Hello {name},</p><p>{message}</p>" + _FOOTER,
)

TEMPLATES: dict[tuple[str, str | None], EmailTemplate] = {
    ("leave", "approved"): EmailTemplate(
        subject="Leave request approved",
        body="<p>Hello {name},</p><p>{message}</p>"
        "<p><strong>Status:</strong> approved</p>" + _FOOTER,
    ),
    ("leave", "rejected"): EmailTemplate(
        subject="Leave request rejected",
        body="<p>Hello {name},</p><p>{message}</p>"
        "<p><strong>Status:</strong> rejected</p>" + _FOOTER,
    ),
    ("leave", None): EmailTemplate(
        subject="Leave update: {title}",
        body="<p>Hello {name},</p><p>{message}</p>" + _FOOTER,
    ),
    ("attendance", "correction_approved"): EmailTemplate(
        subject="Attendance correction approved",
        body="<p>Hello {name},</p><p>{message}</p>" + _FOOTER,
    ),
    ("attendance", "correction_rejected"): EmailTemplate(
        subject="Attendance correction rejected",
        body="<p>Hello {name},</p><p>{message}</p>" + _FOOTER,
    ),
    ("attendance", None): EmailTemplate(
        subject="Attendance update: {title}",
        body="<p>Hello {name},</p><p>{message}</p>" + _FOOTER,
    ),
    ("payroll", "payslip_available"): EmailTemplate(
        subject="Your payslip for {month}/{year} is available",
        body="<p>Hello {name},</p><p>{message}</p>" + _FOOTER,
    ),
    ("payroll", None): EmailTemplate(
        subject="Payroll update: {title}",
        body="<p>Hello {name},</p><p>{message}</p>" + _FOOTER,
    ),
    ("account", None): EmailTemplate(
        subject="Account update: {title}",
        body="<p>Hello {name},</p><p>{message}</p>"
        "<p>If you did not expect this change please contact HR.</p>" + _FOOTER,
    ),
    ("bank", None): EmailTemplate(
        subject="Bank details update",
        body="<p>Hello {name},</p><p>{message}</p>"
        "<p>If you did not expect this change please contact HR.</p>" + _FOOTER,
    ),
    ("system", "welcome"): EmailTemplate(
        subject="Welcome to the team",
        body="<p>Hello {name},</p><p>{message}</p>" + _FOOTER,
    ),
}


def select_template(category: str, action: str | None) -> EmailTemplate:
    """Return the template for ``(category, action)``.

    Falls back to the category-wide template and finally to the generic one.
    """

    return (
        TEMPLATES.get((category, action))
        or TEMPLATES.get((category, None))
        or DEFAULT_TEMPLATE
    )


def render_email(
    user: DirectoryUser,
    payload: NotificationPayload,
    extra: Mapping[str, Any] | None = None,
) -> RenderedEmail:
    """Render the email for ``payload``.

    Raises ``KeyError`` when a template references a value that is missing
    from the payload metadata or ``extra``.
    """

    template = select_template(payload.category, payload.action)
    context: dict[str, str] = {}
    for source in (payload.metadata or {}, extra or {}):
        for key, value in source.items():
            context[str(key)] = html.escape(str(value))
    context.update(
        name=html.escape(user.name),
        title=html.escape(payload.title),
        message=html.escape(payload.message),
        category=html.escape(payload.category),
        type=html.escape(payload.type),
    )
    return RenderedEmail(
        subject=html.unescape(template.subject.format_map(context)),
        html_content=template.body.format_map(context),
    )


__all__ = [
    "EmailTemplate",
    "RenderedEmail",
    "DEFAULT_TEMPLATE",
    "TEMPLATES",
    "select_template",
    "render_email",
]
