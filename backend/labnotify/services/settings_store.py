import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from labnotify.errors import AuthorizationError, ConfigurationError, ValidationError
from labnotify.models.enums import Channel, CHANNEL_ORDER, NotificationType, OPERATOR_ROLES
from labnotify.models.notification_setting import NotificationSetting
from labnotify.models.profile import Profile

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "in_app_enabled",
    "sms_enabled",
    "whatsapp_enabled",
    "email_enabled",
    "template_title",
    "template_message",
    "whatsapp_template_name",
}

_CHANNEL_FLAGS = {
    Channel.IN_APP: "in_app_enabled",
    Channel.SMS: "sms_enabled",
    Channel.WHATSAPP: "whatsapp_enabled",
    Channel.EMAIL: "email_enabled",
}


def enabled_channels(setting: NotificationSetting) -> List[Channel]:
    """Enabled channels in fixed snapshot order: in_app, sms, whatsapp, email."""
    return [c for c in CHANNEL_ORDER if getattr(setting, _CHANNEL_FLAGS[c])]


def is_operator(profile: Optional[Profile]) -> bool:
    return bool(profile) and (profile.role or "").strip().lower() in OPERATOR_ROLES


class NotificationSettingsStore:
    """Per-event-type channel toggles and templates.

    Always reads from the database; there is no cache, so a committed
    update is visible to the next dispatch.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, notification_type: Union[str, NotificationType]) -> Optional[NotificationSetting]:
        key = NotificationType(notification_type).value
        result = await self.session.execute(
            select(NotificationSetting).where(NotificationSetting.notification_type == key)
        )
        return result.scalar_one_or_none()

    async def get(self, notification_type: Union[str, NotificationType]) -> NotificationSetting:
        setting = await self.find(notification_type)
        if setting is None:
            raise ConfigurationError(
                f"No notification settings configured for {NotificationType(notification_type).value}"
            )
        return setting

    async def list(self) -> List[NotificationSetting]:
        result = await self.session.execute(
            select(NotificationSetting).order_by(NotificationSetting.notification_type)
        )
        return list(result.scalars().all())

    async def update(
        self,
        notification_type: Union[str, NotificationType],
        fields: Dict[str, Any],
        actor: Optional[Profile],
    ) -> NotificationSetting:
        if not is_operator(actor):
            raise AuthorizationError("Only administrators can change notification settings")

        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown setting fields: {', '.join(sorted(unknown))}")
        nulled = sorted(k for k in _CHANNEL_FLAGS.values() if k in fields and fields[k] is None)
        if nulled:
            raise ValidationError(f"Channel flags cannot be null: {', '.join(nulled)}")

        setting = await self.get(notification_type)
        for key, value in fields.items():
            setattr(setting, key, value)
        setting.updated_at = datetime.utcnow()
        setting.updated_by = actor.id

        await self.session.commit()
        await self.session.refresh(setting)
        logger.info(
            f"Notification settings for {setting.notification_type} updated by {actor.id}: "
            f"{sorted(fields)}"
        )
        return setting
