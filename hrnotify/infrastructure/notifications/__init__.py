"""Realtime notification helpers for the infrastructure layer."""

from .frames import (
    FRAME_TYPE_CONNECTION,
    FRAME_TYPE_HEARTBEAT,
    connection_frame,
    heartbeat_frame,
    is_reserved_frame,
    payload_frame,
    serialize_notification,
)
from .registry import ConnectionEntry, ConnectionRegistry, RegistryStats, WriteResult
from .sweeper import ConnectionSweeper
from .transport import PushTransport, WebSocketTransport

__all__ = [
    "FRAME_TYPE_CONNECTION",
    "FRAME_TYPE_HEARTBEAT",
    "connection_frame",
    "heartbeat_frame",
    "is_reserved_frame",
    "payload_frame",
    "serialize_notification",
    "ConnectionEntry",
    "ConnectionRegistry",
    "RegistryStats",
    "WriteResult",
    "ConnectionSweeper",
    "PushTransport",
    "WebSocketTransport",
]
