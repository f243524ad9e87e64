from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field

from labnotify.models.enums import NotificationType


class DispatchRequest(BaseModel):
    recipient_id: str = Field(alias="recipientId", min_length=1)
    type: NotificationType
    data: Dict[str, Any] = {}

    model_config = {"populate_by_name": True}


class NotificationResponse(BaseModel):
    id: int
    recipient_id: str
    type: str
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    channels: List[str] = []
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DispatchResponse(BaseModel):
    success: bool = True
    notification: Optional[NotificationResponse] = None
    channels: List[str] = []
    deliveries: Dict[str, str] = {}
    message: Optional[str] = None


class NotificationLogResponse(BaseModel):
    id: int
    notification_id: int
    recipient_id: str
    channel: str
    status: str
    delivered_at: Optional[datetime] = None
    error_message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias=AliasChoices("meta", "metadata"))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NotificationLogHistoryResponse(BaseModel):
    items: List[NotificationLogResponse]
    total: int


class UnreadCountResponse(BaseModel):
    recipient_id: str
    unread: int


class MarkAllReadResponse(BaseModel):
    recipient_id: str
    updated: int
