import enum


class NotificationType(str, enum.Enum):
    BOOKING_CONFIRMED = "booking_confirmed"
    SAMPLE_ASSIGNED = "sample_assigned"
    SAMPLE_COLLECTED = "sample_collected"
    PROCESSING_STARTED = "processing_started"
    REPORT_READY = "report_ready"
    APPOINTMENT_CONFIRMED = "appointment_confirmed"
    APPOINTMENT_CANCELLED = "appointment_cancelled"


class Channel(str, enum.Enum):
    IN_APP = "in_app"
    SMS = "sms"
    WHATSAPP = "whatsapp"
    EMAIL = "email"


# Snapshot and log-creation order
CHANNEL_ORDER = [Channel.IN_APP, Channel.SMS, Channel.WHATSAPP, Channel.EMAIL]


class DeliveryStatus(str, enum.Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


OPERATOR_ROLES = {"super_admin", "admin"}
