import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from labnotify.database import get_session
from labnotify.errors import (
    AuthorizationError,
    ConfigurationError,
    NotificationCreateError,
    NotificationError,
    RecipientNotFoundError,
    ValidationError,
)
from labnotify.models.enums import Channel
from labnotify.schemas.notification import (
    DispatchRequest,
    DispatchResponse,
    MarkAllReadResponse,
    NotificationLogHistoryResponse,
    NotificationLogResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from labnotify.services.channel_client import ChannelClient
from labnotify.services.delivery_log import DeliveryLogRecorder
from labnotify.services.feed_service import NotificationFeed
from labnotify.services.notification_service import NotificationDispatcher, default_clients

logger = logging.getLogger(__name__)

router = APIRouter()


def get_channel_clients() -> Dict[Channel, ChannelClient]:
    return default_clients()


def to_http_error(error: NotificationError) -> HTTPException:
    if isinstance(error, RecipientNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, AuthorizationError):
        return HTTPException(status_code=403, detail=str(error))
    if isinstance(error, (ConfigurationError, NotificationCreateError)):
        return HTTPException(status_code=500, detail=str(error))
    return HTTPException(status_code=500, detail="Internal server error")


@router.post("/dispatch", response_model=DispatchResponse)
async def dispatch_notification(
    data: DispatchRequest,
    session: AsyncSession = Depends(get_session),
    clients: Dict[Channel, ChannelClient] = Depends(get_channel_clients),
):
    dispatcher = NotificationDispatcher(session, clients=clients)
    try:
        result = await dispatcher.dispatch(data.recipient_id, data.type, data.data)
    except NotificationError as e:
        logger.error(f"Dispatch of {data.type.value} to {data.recipient_id} failed: {e}")
        raise to_http_error(e)

    if result.notification is None:
        return DispatchResponse(message="All notification channels are disabled for this type")
    return DispatchResponse(
        notification=NotificationResponse.model_validate(result.notification),
        channels=[c.value for c in result.channels],
        deliveries=result.deliveries,
    )


@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(
    recipient_id: str = Query(..., min_length=1),
    limit: int = Query(default=50, ge=1, le=200),
    session: AsyncSession = Depends(get_session),
):
    return await NotificationFeed(session).list(recipient_id, limit)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    recipient_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    count = await NotificationFeed(session).unread_count(recipient_id)
    return UnreadCountResponse(recipient_id=recipient_id, unread=count)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    recipient_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    updated = await NotificationFeed(session).mark_all_read(recipient_id)
    return MarkAllReadResponse(recipient_id=recipient_id, updated=updated)


@router.get("/logs", response_model=NotificationLogHistoryResponse)
async def get_delivery_history(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    channel: Optional[Channel] = None,
    status: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    items, total = await DeliveryLogRecorder(session).history(
        limit=limit,
        offset=offset,
        channel=channel.value if channel else None,
        status=status,
    )
    return NotificationLogHistoryResponse(
        items=[NotificationLogResponse.model_validate(item) for item in items],
        total=total,
    )


@router.get("/{notification_id}/logs", response_model=List[NotificationLogResponse])
async def get_notification_logs(notification_id: int, session: AsyncSession = Depends(get_session)):
    logs = await DeliveryLogRecorder(session).list_for_notification(notification_id)
    return [NotificationLogResponse.model_validate(log) for log in logs]


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    recipient_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
):
    notification = await NotificationFeed(session).mark_read(notification_id, recipient_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification
