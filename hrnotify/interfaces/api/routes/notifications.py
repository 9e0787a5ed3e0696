"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import json
import logging
from typing import Literal

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from hrnotify.application.use_cases.notifications import NotificationOrchestrator
from hrnotify.domain.entities import NotificationFilter, NotificationPayload
from hrnotify.infrastructure.notifications import (
    ConnectionRegistry,
    WebSocketTransport,
    heartbeat_frame,
)
from hrnotify.infrastructure.security import TokenIdentity, decode_access_token
from hrnotify.interfaces.api.dependencies import (
    get_current_identity,
    get_orchestrator,
    get_registry,
)
from hrnotify.interfaces.api.schemas import (
    ConnectionStatsRead,
    NotificationListResponse,
    NotificationMarkReadRequest,
    NotificationRead,
    UnreadCountResponse,
    UpdatedCountResponse,
)
from hrnotify.utils import utc_now

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)

_POLICY_VIOLATION = 1008


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    is_read: bool | None = Query(None),
    category: str | None = Query(None),
    type: Literal["info", "success", "warning", "error"] | None = Query(None),
    identity: TokenIdentity = Depends(get_current_identity),
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> NotificationListResponse:
    """Return the authenticated user's notifications, newest first."""

    filters = NotificationFilter(
        page=page, page_size=page_size, is_read=is_read, category=category, type=type
    )
    result = await orchestrator.list_for_user(identity.user_id, filters)
    return NotificationListResponse.from_page(result)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    identity: TokenIdentity = Depends(get_current_identity),
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=await orchestrator.unread_count(identity.user_id))


@router.patch("/read", response_model=UpdatedCountResponse)
async def mark_many_read(
    payload: NotificationMarkReadRequest,
    identity: TokenIdentity = Depends(get_current_identity),
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> UpdatedCountResponse:
    updated = await orchestrator.mark_many_read(payload.unique_ids(), identity.user_id)
    return UpdatedCountResponse(updated_count=updated)


@router.patch("/read-all", response_model=UpdatedCountResponse)
async def mark_all_read(
    identity: TokenIdentity = Depends(get_current_identity),
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> UpdatedCountResponse:
    updated = await orchestrator.mark_all_read(identity.user_id)
    return UpdatedCountResponse(updated_count=updated)


@router.patch("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: int,
    identity: TokenIdentity = Depends(get_current_identity),
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> Response:
    if not await orchestrator.mark_read(notification_id, identity.user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found or already read",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    identity: TokenIdentity = Depends(get_current_identity),
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> Response:
    if not await orchestrator.delete(notification_id, identity.user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/test", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
async def send_test_notification(
    identity: TokenIdentity = Depends(get_current_identity),
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> NotificationRead:
    """Send a notification to the caller to verify the delivery path."""

    record = await orchestrator.notify_user(
        identity.user_id,
        NotificationPayload(
            title="Test Notification",
            message="This is a test notification to verify the system is working correctly.",
            type="info",
            category="system",
            metadata={"test": True, "timestamp": utc_now().isoformat()},
        ),
    )
    return NotificationRead.from_entity(record)


@router.get("/connections", response_model=ConnectionStatsRead)
async def connection_stats(
    identity: TokenIdentity = Depends(get_current_identity),
    registry: ConnectionRegistry = Depends(get_registry),
) -> ConnectionStatsRead:
    return ConnectionStatsRead.from_stats(registry.stats())


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=_POLICY_VIOLATION)
        return
    try:
        identity = decode_access_token(token)
    except ValueError:
        await websocket.close(code=_POLICY_VIOLATION)
        return

    services = websocket.app.state.notifications
    registry: ConnectionRegistry = services.registry
    orchestrator: NotificationOrchestrator = services.orchestrator

    await websocket.accept()
    transport = WebSocketTransport(websocket)
    if not await registry.register(identity.user_id, identity.role, transport):
        return

    try:
        while not transport.is_closed:
            try:
                message = json.loads(await websocket.receive_text())
            except (KeyError, ValueError):
                # binary frames carry no text; malformed JSON is ignored
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                registry.touch(identity.user_id)
                await registry.push_to_user(identity.user_id, heartbeat_frame())
            elif message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    valid_ids = [value for value in ids if type(value) is int]
                    await orchestrator.mark_many_read(valid_ids, identity.user_id)
    except WebSocketDisconnect:
        transport.mark_closed()
    finally:
        await registry.deregister(identity.user_id, transport)
