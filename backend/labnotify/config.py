from pydantic_settings import BaseSettings
from typing import List, Optional
import json


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./labnotify.db"
    LOG_LEVEL: str = "INFO"
    API_PORT: int = 8000
    API_HOST: str = "0.0.0.0"
    CORS_ORIGINS: str = '["http://localhost:5173"]'

    # SMS gateway. No defaults for credentials: an unset key means the
    # channel is not configured.
    SMS_PROVIDER: str = "reve"
    SMS_API_KEY: Optional[str] = None
    SMS_SENDER_ID: Optional[str] = None
    SMS_API_URL: Optional[str] = None

    # WhatsApp Business Cloud API
    WHATSAPP_ACCESS_TOKEN: Optional[str] = None
    WHATSAPP_PHONE_NUMBER_ID: Optional[str] = None
    WHATSAPP_API_VERSION: str = "v18.0"
    WHATSAPP_TEMPLATE_LANGUAGE: str = "en"

    PHONE_COUNTRY_CODE: str = "880"

    CHANNEL_TIMEOUT_SECONDS: float = 10.0
    CHANNEL_RETRY_ATTEMPTS: int = 1
    CHANNEL_RETRY_BACKOFF_SECONDS: float = 1.0

    @property
    def cors_origins_list(self) -> List[str]:
        return json.loads(self.CORS_ORIGINS)

    @property
    def sms_configured(self) -> bool:
        return bool(self.SMS_API_KEY and self.SMS_SENDER_ID)

    @property
    def whatsapp_configured(self) -> bool:
        return bool(self.WHATSAPP_ACCESS_TOKEN and self.WHATSAPP_PHONE_NUMBER_ID)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
