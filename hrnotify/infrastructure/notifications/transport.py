"""Push transports the connection registry can write frames to."""

from __future__ import annotations

from typing import Any, Protocol

from fastapi import WebSocket
from starlette.websockets import WebSocketState


class PushTransport(Protocol):
    """A long-lived, server-initiated stream owned by one registry entry."""

    @property
    def is_closed(self) -> bool: ...

    async def send_json(self, data: dict[str, Any]) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class WebSocketTransport:
    """Adapt an accepted FastAPI :class:`WebSocket` to :class:`PushTransport`."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._closed = False

    @property
    def websocket(self) -> WebSocket:
        return self._websocket

    @property
    def is_closed(self) -> bool:
        if self._closed:
            return True
        return (
            self._websocket.client_state == WebSocketState.DISCONNECTED
            or self._websocket.application_state == WebSocketState.DISCONNECTED
        )

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.is_closed:
            raise ConnectionError("websocket is closed")
        await self._websocket.send_json(data)

    async def close(self, code: int = 1000) -> None:
        if self.is_closed:
            self._closed = True
            return
        self._closed = True
        await self._websocket.close(code=code)

    def mark_closed(self) -> None:
        """Record that the peer went away so later writes fail fast."""

        self._closed = True


__all__ = ["PushTransport", "WebSocketTransport"]
