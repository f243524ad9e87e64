from typing import Optional
from datetime import datetime
from pydantic import BaseModel, field_validator


class NotificationSettingResponse(BaseModel):
    id: int
    notification_type: str
    in_app_enabled: bool
    sms_enabled: bool
    whatsapp_enabled: bool
    email_enabled: bool
    template_title: Optional[str] = None
    template_message: Optional[str] = None
    whatsapp_template_name: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    model_config = {"from_attributes": True}


class NotificationSettingUpdate(BaseModel):
    in_app_enabled: Optional[bool] = None
    sms_enabled: Optional[bool] = None
    whatsapp_enabled: Optional[bool] = None
    email_enabled: Optional[bool] = None
    template_title: Optional[str] = None
    template_message: Optional[str] = None
    whatsapp_template_name: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator("in_app_enabled", "sms_enabled", "whatsapp_enabled", "email_enabled")
    @classmethod
    def flag_not_null(cls, v):
        # Omit a flag to leave it unchanged; null is not a channel state
        if v is None:
            raise ValueError("channel flags must be true or false")
        return v


class NotificationTypeInfo(BaseModel):
    type: str
    label: str
    description: str


NOTIFICATION_TYPES = {
    "booking_confirmed": ("Booking Confirmed", "When a new booking is successfully created"),
    "sample_assigned": ("Staff Assigned", "When a collection agent is assigned to a booking"),
    "sample_collected": ("Sample Collected", "When samples are collected from the patient"),
    "processing_started": ("Processing Started", "When samples start being processed at the lab"),
    "report_ready": ("Report Ready", "When test reports are ready for download"),
    "appointment_confirmed": ("Appointment Confirmed", "When a doctor appointment is booked"),
    "appointment_cancelled": ("Appointment Cancelled", "When a doctor appointment is cancelled"),
}
