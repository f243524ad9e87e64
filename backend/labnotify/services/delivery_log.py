import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from labnotify.models.enums import Channel, DeliveryStatus
from labnotify.models.notification import Notification
from labnotify.models.notification_log import NotificationLog

logger = logging.getLogger(__name__)


class DeliveryLogRecorder:
    """Writes one ``NotificationLog`` per (notification, channel).

    Rows start ``pending`` (``delivered`` for in-app) and take at most one
    terminal update. Rows are never deleted.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_logs(self, notification: Notification, channels: List[Channel]) -> Dict[Channel, NotificationLog]:
        now = datetime.utcnow()
        logs: Dict[Channel, NotificationLog] = {}
        for channel in channels:
            in_app = channel == Channel.IN_APP
            log = NotificationLog(
                notification_id=notification.id,
                recipient_id=notification.recipient_id,
                channel=channel.value,
                status=DeliveryStatus.DELIVERED.value if in_app else DeliveryStatus.PENDING.value,
                delivered_at=now if in_app else None,
                meta={"type": notification.type, **(notification.data or {})},
            )
            self.session.add(log)
            logs[channel] = log
        await self.session.commit()
        return logs

    @staticmethod
    def _merge_meta(log: NotificationLog, **extra: Any) -> None:
        # Reassign so the JSON column is flagged dirty
        log.meta = {**(log.meta or {}), **extra}

    async def _finish(
        self,
        log: NotificationLog,
        status: DeliveryStatus,
        error_message: Optional[str] = None,
        **meta: Any,
    ) -> NotificationLog:
        if log.status != DeliveryStatus.PENDING.value:
            raise ValueError(
                f"Delivery log {log.id} ({log.channel}) already {log.status}, cannot mark {status.value}"
            )
        log.status = status.value
        if error_message is not None:
            log.error_message = error_message
        if status == DeliveryStatus.DELIVERED:
            log.delivered_at = datetime.utcnow()
        self._merge_meta(log, **meta)
        await self.session.commit()
        return log

    async def mark_delivered(self, log: NotificationLog, response: Any = None) -> NotificationLog:
        return await self._finish(log, DeliveryStatus.DELIVERED, provider_response=response)

    async def mark_failed(self, log: NotificationLog, error: str, response: Any = None) -> NotificationLog:
        extra = {"error": error}
        if response is not None:
            extra["provider_response"] = response
        return await self._finish(log, DeliveryStatus.FAILED, error_message=error, **extra)

    async def mark_skipped(self, log: NotificationLog, reason: str) -> NotificationLog:
        return await self._finish(log, DeliveryStatus.SKIPPED, error_message=reason, skipped=reason)

    async def add_trace(self, log: NotificationLog, message: str) -> NotificationLog:
        """Annotate a log that stays pending."""
        trace = list((log.meta or {}).get("trace", []))
        trace.append({"at": datetime.utcnow().isoformat(), "message": message})
        self._merge_meta(log, trace=trace)
        await self.session.commit()
        return log

    async def list_for_notification(self, notification_id: int) -> List[NotificationLog]:
        result = await self.session.execute(
            select(NotificationLog)
            .where(NotificationLog.notification_id == notification_id)
            .order_by(NotificationLog.id)
        )
        return list(result.scalars().all())

    async def history(
        self,
        limit: int = 50,
        offset: int = 0,
        channel: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[NotificationLog], int]:
        filters = []
        if channel:
            filters.append(NotificationLog.channel == channel)
        if status:
            filters.append(NotificationLog.status == status)

        count_result = await self.session.execute(
            select(func.count(NotificationLog.id)).where(*filters)
        )
        total = count_result.scalar() or 0

        result = await self.session.execute(
            select(NotificationLog)
            .where(*filters)
            .order_by(NotificationLog.created_at.desc(), NotificationLog.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total
