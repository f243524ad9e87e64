from sqlalchemy import Column, Integer, String, Text, JSON, DateTime, func
from labnotify.database import Base


class SmsLog(Base):
    __tablename__ = "sms_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone = Column(String(32), nullable=False)
    message = Column(Text, nullable=False)
    provider = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False)  # "sent", "failed"
    response = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class WhatsAppLog(Base):
    __tablename__ = "whatsapp_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone = Column(String(32), nullable=False)
    message = Column(Text, nullable=False)
    template_name = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False)
    response = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
