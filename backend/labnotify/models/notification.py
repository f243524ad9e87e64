from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, JSON, DateTime
from sqlalchemy.orm import relationship
from labnotify.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipient_id = Column(String(36), nullable=False, index=True)
    type = Column(String(40), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False, default="")
    data = Column(JSON, nullable=True)
    channels = Column(JSON, nullable=False, default=list)
    read_at = Column(DateTime, nullable=True)
    # Python-side default keeps sub-second ordering on SQLite
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    logs = relationship("NotificationLog", back_populates="notification", order_by="NotificationLog.id")
