"""FastAPI dependency utilities."""

from fastapi import Depends, Request, WebSocket
from fastapi.security import OAuth2PasswordBearer

from activity_api.domain.entities import Principal
from activity_api.domain.errors import Forbidden, Unauthorized
from activity_api.infrastructure.notifications import (
    ActivityPublisher,
    ActivitySubscriptionManager,
)
from activity_api.infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


def resolve_principal(token: str | None) -> Principal:
    """Turn a bearer token into the :class:`Principal` it was issued for."""

    if not token:
        raise Unauthorized("Unauthorized - No token provided")
    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise Unauthorized("Invalid token") from exc

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise Unauthorized("Invalid token") from exc

    role = payload.get("role") or "user"
    if not isinstance(role, str):
        raise Unauthorized("Invalid token")
    return Principal(user_id=user_id, role=role)


def get_current_principal(token: str | None = Depends(oauth2_scheme)) -> Principal:
    """Return the principal authenticated by the request's bearer token."""

    return resolve_principal(token)


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Ensure the authenticated principal has an administrative role."""

    if not principal.is_admin():
        raise Forbidden("Admin access required")
    return principal


def get_activity_publisher(request: Request) -> ActivityPublisher:
    """Return the publisher owned by the application composition root."""

    return request.app.state.activity_publisher


def get_subscription_manager(websocket: WebSocket) -> ActivitySubscriptionManager:
    return websocket.app.state.subscription_manager


__all__ = [
    "get_activity_publisher",
    "get_current_principal",
    "get_subscription_manager",
    "require_admin",
    "resolve_principal",
]
