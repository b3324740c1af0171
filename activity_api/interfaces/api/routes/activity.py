"""Endpoints used by signed-in users to record and review their own activity."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import (
    APIRouter,
    Depends,
    Query,
    Request,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from activity_api.application.use_cases.activity import (
    get_user_sessions,
    get_user_stats,
    ingest_batch,
    ingest_one,
    list_journey,
)
from activity_api.domain.entities import ActivityEvent, Principal
from activity_api.domain.errors import ActivityError, Forbidden, InvalidArgument
from activity_api.infrastructure.database import get_db
from activity_api.infrastructure.notifications import (
    ANALYTICS_CHANNEL,
    ActivityPublisher,
    ActivitySubscriptionManager,
    user_activity_channel,
)
from activity_api.interfaces.api.dependencies import (
    get_activity_publisher,
    get_current_principal,
    get_subscription_manager,
    resolve_principal,
)
from activity_api.interfaces.api.schemas import (
    ActivityBatchRequest,
    ActivityBatchResponse,
    ActivityEventRead,
    ActivityTrackRequest,
    JourneyRead,
    SessionReportRead,
    UserStatsRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/activity", tags=["activity"])


def event_to_schema(event: ActivityEvent) -> ActivityEventRead:
    return ActivityEventRead.model_validate(event)


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("/track", response_model=ActivityEventRead, status_code=status.HTTP_201_CREATED)
def track_activity(
    payload: ActivityTrackRequest,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    publisher: ActivityPublisher = Depends(get_activity_publisher),
) -> ActivityEventRead:
    """Record one activity of the authenticated user, stamped with the server clock."""

    draft = payload.to_draft(
        user_agent=request.headers.get("user-agent"),
        client_ip=_client_ip(request),
    )
    event = ingest_one(db, principal=principal, draft=draft, publisher=publisher)
    return event_to_schema(event)


@router.post(
    "/batch", response_model=ActivityBatchResponse, status_code=status.HTTP_201_CREATED
)
def track_activity_batch(
    payload: ActivityBatchRequest,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    publisher: ActivityPublisher = Depends(get_activity_publisher),
) -> ActivityBatchResponse:
    """Record several activities at once; either all of them are stored or none."""

    user_agent = request.headers.get("user-agent")
    client_ip = _client_ip(request)
    drafts = [
        item.to_draft(user_agent=user_agent, client_ip=client_ip, timestamp=item.timestamp)
        for item in payload.activities
    ]
    count = ingest_batch(db, principal=principal, drafts=drafts, publisher=publisher)
    return ActivityBatchResponse(count=count)


@router.get("/my-journey", response_model=JourneyRead)
def read_my_journey(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    activity_type: str | None = Query(None),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of events to return"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> JourneyRead:
    """Return the caller's events, newest first."""

    events = list_journey(
        db,
        user_id=principal.user_id,
        start=start_date,
        end=end_date,
        activity_type=activity_type,
        limit=limit,
    )
    return JourneyRead(data=[event_to_schema(event) for event in events], count=len(events))


@router.get("/my-stats", response_model=UserStatsRead)
def read_my_stats(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserStatsRead:
    stats = get_user_stats(db, user_id=principal.user_id, start=start_date, end=end_date)
    return UserStatsRead.model_validate(stats)


@router.get("/my-sessions", response_model=SessionReportRead)
def read_my_sessions(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> SessionReportRead:
    """Return the caller's sessions rebuilt from their event history."""

    report = get_user_sessions(
        db, user_id=principal.user_id, start=start_date, end=end_date
    )
    return SessionReportRead.model_validate(report)


def _resolve_channel(principal: Principal, message: dict[str, Any]) -> str:
    """Map a subscription request to a channel the principal may watch."""

    channel = message.get("channel")
    if channel == ANALYTICS_CHANNEL:
        if not principal.is_admin():
            raise Forbidden("Admin access required")
        return ANALYTICS_CHANNEL

    if channel == "user-activity":
        raw_user_id = message.get("user_id", principal.user_id)
        try:
            user_id = int(raw_user_id)
        except (TypeError, ValueError) as exc:
            raise InvalidArgument("user_id must be an integer") from exc
        if user_id != principal.user_id and not principal.is_admin():
            raise Forbidden("You can only watch your own activity")
        return user_activity_channel(user_id)

    raise InvalidArgument(f"Unknown channel: {channel}")


@router.websocket("/ws")
async def activity_websocket(
    websocket: WebSocket,
    manager: ActivitySubscriptionManager = Depends(get_subscription_manager),
) -> None:
    """Websocket endpoint streaming live activity to subscribed dashboards."""

    try:
        principal = resolve_principal(websocket.query_params.get("token"))
    except ActivityError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type not in ("subscribe", "unsubscribe"):
                continue

            try:
                channel = _resolve_channel(principal, message)
            except ActivityError as exc:
                await websocket.send_json({"type": "error", "detail": exc.message})
                continue

            if message_type == "subscribe":
                manager.subscribe(channel, websocket)
                logger.debug("User %s subscribed to %s", principal.user_id, channel)
                await websocket.send_json({"type": "subscribed", "channel": channel})
            else:
                manager.unsubscribe(channel, websocket)
                await websocket.send_json({"type": "unsubscribed", "channel": channel})
    except WebSocketDisconnect:
        pass
    finally:
        manager.unsubscribe_all(websocket)


__all__ = ["event_to_schema", "router"]
