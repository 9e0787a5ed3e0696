from fastapi import APIRouter, Depends

from hrnotify.infrastructure.notifications import ConnectionRegistry
from hrnotify.interfaces.api.dependencies import get_registry

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(registry: ConnectionRegistry = Depends(get_registry)) -> dict[str, object]:
    return {"status": "ok", "connections": registry.stats().total}
