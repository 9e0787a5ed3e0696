"""Utility helpers for reusable functionality."""

from .datetime import (
    days_ago,
    ensure_naive_utc,
    ensure_utc,
    isoformat_utc,
    utc_now,
)

__all__ = [
    "days_ago",
    "ensure_naive_utc",
    "ensure_utc",
    "isoformat_utc",
    "utc_now",
]
