import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from labnotify.config import settings
from labnotify.errors import ChannelSkipped, NotificationCreateError, RecipientNotFoundError, ValidationError
from labnotify.models.enums import Channel, DeliveryStatus, NotificationType
from labnotify.models.notification import Notification
from labnotify.models.notification_log import NotificationLog
from labnotify.models.notification_setting import NotificationSetting
from labnotify.models.profile import Profile
from labnotify.schemas.notification import NotificationResponse
from labnotify.services.channel_client import ChannelClient, ChannelResult
from labnotify.services.delivery_log import DeliveryLogRecorder
from labnotify.services.email_client import EmailClient
from labnotify.services.notification_bus import NotificationBus, bus as default_bus
from labnotify.services.settings_store import NotificationSettingsStore, enabled_channels
from labnotify.services.sms_client import SmsClient
from labnotify.services.template_renderer import render
from labnotify.services.whatsapp_client import WhatsAppClient

logger = logging.getLogger(__name__)

Outcome = Union[ChannelResult, ChannelSkipped]


@dataclass
class DispatchResult:
    notification: Optional[Notification]
    channels: List[Channel] = field(default_factory=list)
    # channel value -> final delivery status
    deliveries: Dict[str, str] = field(default_factory=dict)


def default_clients() -> Dict[Channel, ChannelClient]:
    return {
        Channel.SMS: SmsClient(),
        Channel.WHATSAPP: WhatsAppClient(),
        Channel.EMAIL: EmailClient(),
    }


class NotificationDispatcher:
    """Turns one domain event into a notification plus per-channel deliveries.

    The notification row and its delivery logs are the only business state
    written here. Outbound channels are attempted concurrently; a failing
    channel never fails the dispatch or its siblings.
    """

    def __init__(
        self,
        session: AsyncSession,
        clients: Optional[Dict[Channel, ChannelClient]] = None,
        bus: Optional[NotificationBus] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ):
        self.session = session
        self.clients = clients if clients is not None else default_clients()
        self.bus = bus or default_bus
        self.settings_store = NotificationSettingsStore(session)
        self.log_recorder = DeliveryLogRecorder(session)
        self.timeout = timeout if timeout is not None else settings.CHANNEL_TIMEOUT_SECONDS
        self.retry_attempts = retry_attempts if retry_attempts is not None else settings.CHANNEL_RETRY_ATTEMPTS
        self.retry_backoff = retry_backoff if retry_backoff is not None else settings.CHANNEL_RETRY_BACKOFF_SECONDS

    async def dispatch(
        self,
        recipient_id: str,
        event_type: Union[str, NotificationType],
        payload: Optional[Mapping[str, Any]] = None,
    ) -> DispatchResult:
        event = self._validate(recipient_id, event_type, payload)
        recipient = await self._get_recipient(recipient_id)
        setting = await self.settings_store.get(event)

        channels = enabled_channels(setting)
        if not channels:
            logger.info(f"All notification channels disabled for {event.value}; nothing sent")
            return DispatchResult(notification=None)

        data = dict(payload or {})
        title = render(setting.template_title or event.value, data)
        message = render(setting.template_message, data)

        notification = await self._create_notification(recipient_id, event, title, message, data, channels)
        logger.info(
            f"Notification {notification.id} ({event.value}) for {recipient_id} "
            f"via {', '.join(c.value for c in channels)}"
        )
        self.bus.publish(
            recipient_id,
            "notification.created",
            NotificationResponse.model_validate(notification).model_dump(mode="json"),
        )

        logs = await self._create_logs(notification, channels)
        deliveries = {c.value: DeliveryStatus.PENDING.value for c in channels}
        if Channel.IN_APP in channels:
            deliveries[Channel.IN_APP.value] = DeliveryStatus.DELIVERED.value

        outbound = [c for c in channels if c != Channel.IN_APP]
        if outbound:
            outcomes = await asyncio.gather(
                *(self._deliver(c, recipient, message, setting) for c in outbound)
            )
            for channel, outcome in zip(outbound, outcomes):
                deliveries[channel.value] = await self._record_outcome(
                    notification, logs.get(channel), channel, outcome
                )

        return DispatchResult(notification=notification, channels=channels, deliveries=deliveries)

    @staticmethod
    def _validate(recipient_id, event_type, payload) -> NotificationType:
        if not recipient_id or not str(recipient_id).strip():
            raise ValidationError("Missing required fields: recipientId")
        if not event_type:
            raise ValidationError("Missing required fields: type")
        try:
            event = NotificationType(event_type)
        except ValueError:
            raise ValidationError(f"Unknown notification type: {event_type}")
        if payload is not None and not isinstance(payload, Mapping):
            raise ValidationError("Notification data must be an object")
        return event

    async def _get_recipient(self, recipient_id: str) -> Profile:
        result = await self.session.execute(select(Profile).where(Profile.id == recipient_id))
        recipient = result.scalar_one_or_none()
        if recipient is None:
            raise RecipientNotFoundError(recipient_id)
        return recipient

    async def _create_notification(
        self,
        recipient_id: str,
        event: NotificationType,
        title: str,
        message: str,
        data: Dict[str, Any],
        channels: List[Channel],
    ) -> Notification:
        notification = Notification(
            recipient_id=recipient_id,
            type=event.value,
            title=title,
            message=message,
            data=data,
            channels=[c.value for c in channels],
        )
        self.session.add(notification)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to insert notification for {recipient_id}: {e}")
            raise NotificationCreateError("Failed to create notification") from e
        return notification

    async def _create_logs(self, notification: Notification, channels: List[Channel]) -> Dict[Channel, NotificationLog]:
        try:
            return await self.log_recorder.create_logs(notification, channels)
        except SQLAlchemyError as e:
            # The notification itself is already committed
            await self.session.rollback()
            logger.error(f"Failed to insert delivery logs for notification {notification.id}: {e}")
            return {}

    @staticmethod
    def _destination(channel: Channel, recipient: Profile) -> Optional[str]:
        if channel in (Channel.SMS, Channel.WHATSAPP):
            if not recipient.phone:
                raise ChannelSkipped("no phone on file")
            return recipient.phone
        return recipient.email

    async def _deliver(
        self,
        channel: Channel,
        recipient: Profile,
        message: str,
        setting: NotificationSetting,
    ) -> Outcome:
        try:
            destination = self._destination(channel, recipient)
        except ChannelSkipped as e:
            return e

        client = self.clients.get(channel)
        if client is None:
            return ChannelResult.not_configured(f"No {channel.value} client registered")

        options = {}
        if channel == Channel.WHATSAPP and setting.whatsapp_template_name:
            options = {"template_name": setting.whatsapp_template_name, "template_params": [message]}
        return await self._send_with_retry(client, channel, destination, message, options)

    async def _send_with_retry(
        self,
        client: ChannelClient,
        channel: Channel,
        destination: Optional[str],
        message: str,
        options: dict,
    ) -> ChannelResult:
        attempt = 0
        while True:
            try:
                send = client.send(destination, message, **options)
                if client.owns_deadline:
                    result = await send
                else:
                    result = await asyncio.wait_for(send, timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.warning(f"{channel.value} send timed out after {self.timeout}s")
                result = ChannelResult(success=False, error="timeout", provider=channel.value)
            except ValidationError as e:
                return ChannelResult(success=False, error=str(e), provider=channel.value, retryable=False)
            except Exception as e:
                logger.exception(f"{channel.value} client raised unexpectedly")
                return ChannelResult(success=False, error=str(e) or e.__class__.__name__,
                                     provider=channel.value, retryable=False)

            if result.success or result.deferred or not result.retryable or attempt >= self.retry_attempts:
                return result

            attempt += 1
            delay = self.retry_backoff * attempt
            logger.info(f"Retrying {channel.value} in {delay:.1f}s after error: {result.error}")
            await asyncio.sleep(delay)

    async def _record_outcome(
        self,
        notification: Notification,
        log: Optional[NotificationLog],
        channel: Channel,
        outcome: Outcome,
    ) -> str:
        if isinstance(outcome, ChannelSkipped):
            logger.info(f"Skipping {channel.value} for notification {notification.id}: {outcome}")
            status, update = DeliveryStatus.SKIPPED, self.log_recorder.mark_skipped
            args = (str(outcome),)
        elif outcome.deferred:
            logger.warning(f"{channel.value} for notification {notification.id} left pending: {outcome.error}")
            status, update = DeliveryStatus.PENDING, self.log_recorder.add_trace
            args = (outcome.error,)
        elif outcome.success:
            logger.info(f"{channel.value} delivered for notification {notification.id}")
            status, update = DeliveryStatus.DELIVERED, self.log_recorder.mark_delivered
            args = (outcome.response,)
        else:
            logger.warning(f"{channel.value} failed for notification {notification.id}: {outcome.error}")
            status, update = DeliveryStatus.FAILED, self.log_recorder.mark_failed
            args = (outcome.error or "unknown error", outcome.response)

        if log is not None:
            try:
                await update(log, *args)
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error(f"Failed to update {channel.value} log for notification {notification.id}: {e}")
        return status.value
