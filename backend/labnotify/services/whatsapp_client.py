import logging
from typing import List, Optional

from labnotify.config import settings
from labnotify.errors import ValidationError
from labnotify.models.enums import Channel
from labnotify.services.channel_client import ChannelClient, ChannelResult
from labnotify.services.send_log import SendLogRecorder
from labnotify.utils.phone import normalize_phone

logger = logging.getLogger(__name__)


def _graph_error(data: dict) -> Optional[str]:
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return "Failed to send WhatsApp message"


class WhatsAppClient(ChannelClient):
    """WhatsApp Business Cloud API sender.

    Template messages are required for first contact and outside the
    24-hour customer service window; free-form text only works inside an
    open session.
    """

    channel = Channel.WHATSAPP
    owns_deadline = True
    BASE_URL = "https://graph.facebook.com"

    def __init__(
        self,
        access_token: Optional[str] = None,
        phone_number_id: Optional[str] = None,
        api_version: Optional[str] = None,
        template_language: Optional[str] = None,
        country_code: Optional[str] = None,
        timeout: Optional[float] = None,
        send_log: Optional[SendLogRecorder] = None,
    ):
        self.access_token = access_token if access_token is not None else settings.WHATSAPP_ACCESS_TOKEN
        self.phone_number_id = phone_number_id if phone_number_id is not None else settings.WHATSAPP_PHONE_NUMBER_ID
        self.api_version = api_version or settings.WHATSAPP_API_VERSION
        self.template_language = template_language or settings.WHATSAPP_TEMPLATE_LANGUAGE
        self.country_code = country_code or settings.PHONE_COUNTRY_CODE
        self.timeout = timeout or settings.CHANNEL_TIMEOUT_SECONDS
        self.send_log = send_log or SendLogRecorder()

    @property
    def configured(self) -> bool:
        return bool(self.access_token and self.phone_number_id)

    @property
    def messages_url(self) -> str:
        return f"{self.BASE_URL}/{self.api_version}/{self.phone_number_id}/messages"

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def build_payload(
        self,
        phone: str,
        message: str,
        template_name: Optional[str] = None,
        template_params: Optional[List[str]] = None,
    ) -> dict:
        if template_name:
            template = {
                "name": template_name,
                "language": {"code": self.template_language},
            }
            if template_params:
                template["components"] = [{
                    "type": "body",
                    "parameters": [{"type": "text", "text": str(p)} for p in template_params],
                }]
            return {
                "messaging_product": "whatsapp",
                "to": phone,
                "type": "template",
                "template": template,
            }
        return {
            "messaging_product": "whatsapp",
            "to": phone,
            "type": "text",
            "text": {"body": message},
        }

    async def send(
        self,
        destination: str,
        message: str,
        template_name: Optional[str] = None,
        template_params: Optional[List[str]] = None,
        **options,
    ) -> ChannelResult:
        if not self.configured:
            logger.info("WhatsApp not configured - missing credentials")
            return ChannelResult.not_configured(
                "WhatsApp gateway not configured. Set WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID.",
                provider="whatsapp",
            )
        if not destination or not message:
            raise ValidationError("Missing required fields: phone, message")

        # Cloud API takes digits only
        phone = normalize_phone(destination, self.country_code).lstrip("+")
        logger.info(f"Sending WhatsApp {'template' if template_name else 'text'} message to {phone}")

        result = await self._post(
            self.messages_url,
            json=self.build_payload(phone, message, template_name, template_params),
            headers=self._headers(),
            timeout=self.timeout,
            provider="whatsapp",
            error_field=_graph_error,
        )
        await self.send_log.record_whatsapp(phone, message, result, template_name=template_name)
        return result
