"""Aggregate application use cases."""

from .notifications import NotificationOrchestrator, SecondaryChannelDispatcher

__all__ = [
    "NotificationOrchestrator",
    "SecondaryChannelDispatcher",
]
