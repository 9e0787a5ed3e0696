"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalize ``value`` so it is expressed in UTC.

    SQLite drops ``tzinfo`` when storing ``DATETIME`` columns, so naive values
    read back from the database are assumed to already be UTC.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ensure_naive_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` converted to UTC without attaching ``tzinfo``."""

    normalized = ensure_utc(value)
    if normalized is None:
        return None
    return normalized.replace(tzinfo=None)


def isoformat_utc(value: datetime | None) -> str | None:
    """Render ``value`` as an ISO-8601 string with a ``Z`` suffix."""

    normalized = ensure_utc(value)
    if normalized is None:
        return None
    return normalized.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def days_ago(days: int, *, now: datetime | None = None) -> datetime:
    """Return the instant ``days`` days before ``now`` (defaults to the current time)."""

    reference = ensure_utc(now) or utc_now()
    return reference - timedelta(days=days)
