"""Public helpers for emitting and querying notifications."""

from .escalation import ESCALATED_TYPES, IMPORTANT_CATEGORIES, should_escalate
from .orchestrator import NotificationOrchestrator
from .secondary_channel import SecondaryChannelDispatcher
from .templates import EmailTemplate, RenderedEmail, render_email, select_template

__all__ = [
    "ESCALATED_TYPES",
    "IMPORTANT_CATEGORIES",
    "should_escalate",
    "NotificationOrchestrator",
    "SecondaryChannelDispatcher",
    "EmailTemplate",
    "RenderedEmail",
    "render_email",
    "select_template",
]
