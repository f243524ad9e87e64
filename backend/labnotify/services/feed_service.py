import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from labnotify.models.notification import Notification
from labnotify.services.notification_bus import NotificationBus, bus as default_bus

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 50
MAX_FEED_LIMIT = 200


class NotificationFeed:
    """Read side of the in-app channel: listing, unread count, read marks."""

    def __init__(self, session: AsyncSession, bus: Optional[NotificationBus] = None):
        self.session = session
        self.bus = bus or default_bus

    async def list(self, recipient_id: str, limit: int = DEFAULT_FEED_LIMIT) -> List[Notification]:
        limit = max(1, min(limit, MAX_FEED_LIMIT))
        result = await self.session.execute(
            select(Notification)
            .where(Notification.recipient_id == recipient_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def unread_count(self, recipient_id: str) -> int:
        result = await self.session.execute(
            select(func.count(Notification.id)).where(
                Notification.recipient_id == recipient_id,
                Notification.read_at.is_(None),
            )
        )
        return result.scalar() or 0

    async def mark_read(self, notification_id: int, recipient_id: str) -> Optional[Notification]:
        result = await self.session.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.recipient_id == recipient_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            return None
        if notification.read_at is None:
            notification.read_at = datetime.utcnow()
            await self.session.commit()
            self.bus.publish(recipient_id, "notification.read", {"ids": [notification.id]})
        return notification

    async def mark_all_read(self, recipient_id: str) -> int:
        result = await self.session.execute(
            select(Notification).where(
                Notification.recipient_id == recipient_id,
                Notification.read_at.is_(None),
            )
        )
        unread = result.scalars().all()
        now = datetime.utcnow()
        for notification in unread:
            notification.read_at = now
        await self.session.commit()
        updated = len(unread)
        if updated:
            logger.debug(f"Marked {updated} notifications read for {recipient_id}")
            self.bus.publish(recipient_id, "notification.read", {"all": True})
        return updated
