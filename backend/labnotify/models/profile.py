import uuid

from sqlalchemy import Column, String, DateTime, func
from labnotify.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(200), nullable=True)
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="patient")
    created_at = Column(DateTime, server_default=func.now())
