from typing import Optional, List, Any
from datetime import datetime
from pydantic import BaseModel, Field


class SmsSendRequest(BaseModel):
    phone: str = ""
    message: str = ""
    provider: Optional[str] = None


class WhatsAppSendRequest(BaseModel):
    phone: str = ""
    message: str = ""
    template_name: Optional[str] = Field(default=None, alias="templateName")
    template_params: Optional[List[str]] = Field(default=None, alias="templateParams")

    model_config = {"populate_by_name": True}


class ChannelSendResponse(BaseModel):
    success: bool
    provider: Optional[str] = None
    response: Any = None


class SmsLogResponse(BaseModel):
    id: int
    phone: str
    message: str
    provider: str
    status: str
    response: Any = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class WhatsAppLogResponse(BaseModel):
    id: int
    phone: str
    message: str
    template_name: Optional[str] = None
    status: str
    response: Any = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
