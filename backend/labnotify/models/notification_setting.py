from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from labnotify.database import Base


class NotificationSetting(Base):
    __tablename__ = "notification_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    notification_type = Column(String(40), nullable=False, unique=True, index=True)
    in_app_enabled = Column(Boolean, nullable=False, default=True)
    sms_enabled = Column(Boolean, nullable=False, default=False)
    whatsapp_enabled = Column(Boolean, nullable=False, default=False)
    email_enabled = Column(Boolean, nullable=False, default=False)
    template_title = Column(String(255), nullable=True)
    template_message = Column(Text, nullable=True)
    whatsapp_template_name = Column(String(100), nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow)
    updated_by = Column(String(36), nullable=True)
