"""Endpoints and websocket handler for user notifications."""

from __future__ import annotations

import logging

from fastapi import (
    APIRouter,
    Body,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from scholarhub.application.use_cases.notifications import (
    NotificationNotFoundError,
    broadcast_notification_event,
    delete_all_notifications,
    delete_notification,
    list_notifications,
    mark_all_notifications_as_read,
    mark_notification_as_read,
    mark_notifications_as_read,
    register_push_token,
    remove_push_token,
    send_notification,
)
from scholarhub.domain.entities import Notification, User
from scholarhub.infrastructure.database import SessionLocal, get_db
from scholarhub.infrastructure.notifications import broadcast_manager, recipient_channel
from scholarhub.infrastructure.repositories import UserRepository
from scholarhub.interfaces.api.dependencies import (
    get_current_active_user,
    require_admin,
    resolve_current_user,
)
from scholarhub.interfaces.api.schemas import (
    BroadcastTestRequest,
    MarkAllReadResponse,
    NotificationRead,
    PushSubscriptionCreate,
    PushSubscriptionRead,
    TestNotificationRequest,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or "",
        user_id=notification.user_id,
        title=notification.title,
        message=notification.message,
        type=notification.type,
        action_url=notification.action_url,
        read_at=notification.read_at,
        created_at=notification.created_at,
    )


def _not_found(exc: NotificationNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("", response_model=list[NotificationRead])
def get_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationRead]:
    """Return the notifications of the authenticated user, newest first."""

    notifications = list_notifications(db, user_id=current_user.id)
    return [_notification_to_schema(notification) for notification in notifications]


@router.post("/mark-all-read", response_model=MarkAllReadResponse)
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MarkAllReadResponse:
    """Mark every unread notification of the authenticated user as read."""

    updated = mark_all_notifications_as_read(db, user_id=current_user.id)
    return MarkAllReadResponse(updated=updated)


@router.post("/test", response_model=list[NotificationRead], status_code=status.HTTP_201_CREATED)
def send_test_notification(
    payload: TestNotificationRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationRead]:
    """Send a notification to the caller through every configured channel."""

    payload = payload or TestNotificationRequest()
    saved = send_notification(
        db,
        [current_user.id],
        title=payload.title,
        message=payload.message,
        type=payload.type,
        action_url=payload.action_url,
    )
    return [_notification_to_schema(notification) for notification in saved]


@router.post("/test-broadcast", status_code=status.HTTP_202_ACCEPTED)
def send_test_broadcast(
    payload: BroadcastTestRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> dict[str, int]:
    """Publish a realtime-only event to every active user."""

    payload = payload or BroadcastTestRequest()
    recipients = UserRepository(db).list_active_ids()
    broadcast_notification_event(
        recipients, title="Test Broadcast", message=payload.message, type="info"
    )
    logger.info("User %s broadcast a test event to %d users", current_user.id, len(recipients))
    return {"recipients": len(recipients)}


@router.post(
    "/push-subscriptions",
    response_model=PushSubscriptionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_push_subscription(
    payload: PushSubscriptionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PushSubscriptionRead:
    """Register a push token for the authenticated user."""

    try:
        subscription = register_push_token(db, user_id=current_user.id, token=payload.token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return PushSubscriptionRead(
        id=subscription.id,
        user_id=subscription.user_id,
        token=subscription.token,
        created_at=subscription.created_at,
    )


@router.delete("/push-subscriptions", status_code=status.HTTP_204_NO_CONTENT)
def delete_push_subscription(
    token: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Response:
    remove_push_token(db, user_id=current_user.id, token=token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    """Mark one notification as read; repeated calls keep the first ``read_at``."""

    try:
        notification = mark_notification_as_read(
            db, user_id=current_user.id, notification_id=notification_id
        )
    except NotificationNotFoundError as exc:
        raise _not_found(exc) from exc
    return _notification_to_schema(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Response:
    try:
        delete_notification(db, user_id=current_user.id, notification_id=notification_id)
    except NotificationNotFoundError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def remove_all_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Response:
    delete_all_notifications(db, user_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Subscribe the authenticated user to their private broadcast channel."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    except HTTPException:
        await websocket.close(code=1008)
        return
    finally:
        session.close()

    channel = recipient_channel(user.id)
    await broadcast_manager.connect(channel, websocket)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    ack_session = SessionLocal()
                    try:
                        mark_notifications_as_read(
                            ack_session,
                            user_id=user.id,
                            notification_ids=[str(value) for value in ids],
                        )
                    finally:
                        ack_session.close()
                continue
    except WebSocketDisconnect:
        broadcast_manager.disconnect(channel, websocket)
    except Exception:
        broadcast_manager.disconnect(channel, websocket)
        raise
