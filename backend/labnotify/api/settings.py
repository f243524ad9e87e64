from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from labnotify.api.notifications import to_http_error
from labnotify.database import get_session
from labnotify.errors import NotificationError
from labnotify.models.enums import NotificationType
from labnotify.models.profile import Profile
from labnotify.schemas.settings import (
    NOTIFICATION_TYPES,
    NotificationSettingResponse,
    NotificationSettingUpdate,
    NotificationTypeInfo,
)
from labnotify.services.settings_store import NotificationSettingsStore

router = APIRouter()


async def get_actor(
    x_profile_id: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session),
) -> Optional[Profile]:
    """Profile named by the X-Profile-Id header, set by the auth gateway."""
    if not x_profile_id:
        return None
    result = await session.execute(select(Profile).where(Profile.id == x_profile_id))
    return result.scalar_one_or_none()


@router.get("/", response_model=List[NotificationSettingResponse])
async def list_settings(session: AsyncSession = Depends(get_session)):
    return await NotificationSettingsStore(session).list()


@router.get("/types", response_model=List[NotificationTypeInfo])
async def list_notification_types():
    return [
        NotificationTypeInfo(type=key, label=label, description=description)
        for key, (label, description) in NOTIFICATION_TYPES.items()
    ]


@router.get("/{notification_type}", response_model=NotificationSettingResponse)
async def get_setting(notification_type: NotificationType, session: AsyncSession = Depends(get_session)):
    setting = await NotificationSettingsStore(session).find(notification_type)
    if not setting:
        raise HTTPException(status_code=404, detail="Settings not found")
    return setting


@router.put("/{notification_type}", response_model=NotificationSettingResponse)
async def update_setting(
    notification_type: NotificationType,
    data: NotificationSettingUpdate,
    actor: Optional[Profile] = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
):
    try:
        return await NotificationSettingsStore(session).update(
            notification_type, data.model_dump(exclude_unset=True), actor
        )
    except NotificationError as e:
        raise to_http_error(e)
