import logging
from typing import Optional

from labnotify.database import async_session_factory
from labnotify.models.send_log import SmsLog, WhatsAppLog
from labnotify.services.channel_client import ChannelResult

logger = logging.getLogger(__name__)


class SendLogRecorder:
    """Append-only provider audit sink (``sms_logs`` / ``whatsapp_logs``).

    Each row is written in its own session so it survives whatever happens
    to the caller's transaction. Write failures are logged, never raised.
    """

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or async_session_factory

    @staticmethod
    def _status(result: ChannelResult) -> str:
        return "sent" if result.success else "failed"

    @staticmethod
    def _response(result: ChannelResult):
        if result.success:
            return result.response
        return result.response if result.response is not None else result.error

    async def _add(self, row) -> None:
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except Exception as e:
            logger.error(f"Failed to write {row.__tablename__} entry: {e}")

    async def record_sms(self, phone: str, message: str, provider: str, result: ChannelResult) -> None:
        await self._add(SmsLog(
            phone=phone,
            message=message,
            provider=provider,
            status=self._status(result),
            response=self._response(result),
        ))

    async def record_whatsapp(
        self,
        phone: str,
        message: str,
        result: ChannelResult,
        template_name: Optional[str] = None,
    ) -> None:
        await self._add(WhatsAppLog(
            phone=phone,
            message=message,
            template_name=template_name,
            status=self._status(result),
            response=self._response(result),
        ))
