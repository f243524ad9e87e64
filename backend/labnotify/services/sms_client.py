import logging
from typing import Optional

from labnotify.config import settings
from labnotify.errors import ValidationError
from labnotify.models.enums import Channel
from labnotify.services.channel_client import ChannelClient, ChannelResult
from labnotify.services.send_log import SendLogRecorder
from labnotify.utils.phone import normalize_phone

logger = logging.getLogger(__name__)


class ReveProvider:
    name = "reve"
    default_url = "https://api.revecloud.com/sms/send"

    @staticmethod
    def headers(api_key: str) -> dict:
        return {"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"}

    @staticmethod
    def body(phone: str, message: str, sender_id: str) -> dict:
        return {"to": phone, "message": message, "sender_id": sender_id}

    @staticmethod
    def error_message(data: dict) -> Optional[str]:
        return data.get("message") or "Failed to send SMS via Reve"


class KhudebartaProvider:
    name = "khudebarta"
    default_url = "https://api.khudebarta.com/v1/sms/send"

    @staticmethod
    def headers(api_key: str) -> dict:
        return {"Content-Type": "application/json", "X-API-Key": api_key}

    @staticmethod
    def body(phone: str, message: str, sender_id: str) -> dict:
        return {"recipient": phone, "text": message, "sender": sender_id}

    @staticmethod
    def error_message(data: dict) -> Optional[str]:
        return data.get("error") or "Failed to send SMS via Khudebarta"


SMS_PROVIDERS = {p.name: p for p in (ReveProvider, KhudebartaProvider)}
DEFAULT_SMS_PROVIDER = ReveProvider.name


class SmsClient(ChannelClient):
    channel = Channel.SMS
    owns_deadline = True

    def __init__(
        self,
        api_key: Optional[str] = None,
        sender_id: Optional[str] = None,
        api_url: Optional[str] = None,
        provider: Optional[str] = None,
        country_code: Optional[str] = None,
        timeout: Optional[float] = None,
        send_log: Optional[SendLogRecorder] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.SMS_API_KEY
        self.sender_id = sender_id if sender_id is not None else settings.SMS_SENDER_ID
        self.api_url = api_url if api_url is not None else settings.SMS_API_URL
        self.provider = provider or settings.SMS_PROVIDER or DEFAULT_SMS_PROVIDER
        self.country_code = country_code or settings.PHONE_COUNTRY_CODE
        self.timeout = timeout or settings.CHANNEL_TIMEOUT_SECONDS
        self.send_log = send_log or SendLogRecorder()

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.sender_id)

    def _resolve_provider(self, name: Optional[str]):
        key = (name or self.provider or DEFAULT_SMS_PROVIDER).strip().lower()
        provider = SMS_PROVIDERS.get(key)
        if provider is None:
            logger.warning(f"Unknown SMS provider '{key}', falling back to {DEFAULT_SMS_PROVIDER}")
            provider = SMS_PROVIDERS[DEFAULT_SMS_PROVIDER]
        return provider

    async def send(self, destination: str, message: str, provider: Optional[str] = None, **options) -> ChannelResult:
        if not self.configured:
            logger.info("SMS not configured - missing SMS_API_KEY or SMS_SENDER_ID")
            return ChannelResult.not_configured(
                "SMS gateway not configured. Set SMS_API_KEY and SMS_SENDER_ID."
            )
        if not destination or not message:
            raise ValidationError("Missing required fields: phone, message")

        sms_provider = self._resolve_provider(provider)
        phone = normalize_phone(destination, self.country_code)
        logger.info(f"Sending SMS via {sms_provider.name} to {phone}")

        result = await self._post(
            self.api_url or sms_provider.default_url,
            json=sms_provider.body(phone, message, self.sender_id),
            headers=sms_provider.headers(self.api_key),
            timeout=self.timeout,
            provider=sms_provider.name,
            error_field=sms_provider.error_message,
        )
        await self.send_log.record_sms(phone, message, sms_provider.name, result)
        return result
