"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hrnotify.application.use_cases.notifications import NotificationOrchestrator
from hrnotify.bootstrap import NotificationServices
from hrnotify.infrastructure.notifications import ConnectionRegistry
from hrnotify.infrastructure.security import TokenIdentity, decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def resolve_identity(token: str) -> TokenIdentity:
    """Return the identity carried by ``token`` or raise a 401."""

    try:
        return decode_access_token(token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenIdentity:
    """Return the authenticated caller from the bearer token."""

    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return resolve_identity(credentials.credentials)


def get_services(request: Request) -> NotificationServices:
    return request.app.state.notifications


def get_orchestrator(
    services: NotificationServices = Depends(get_services),
) -> NotificationOrchestrator:
    return services.orchestrator


def get_registry(services: NotificationServices = Depends(get_services)) -> ConnectionRegistry:
    return services.registry


__all__ = [
    "bearer_scheme",
    "resolve_identity",
    "get_current_identity",
    "get_services",
    "get_orchestrator",
    "get_registry",
]
