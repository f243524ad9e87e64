from labnotify.models.enums import NotificationType, Channel, DeliveryStatus, CHANNEL_ORDER
from labnotify.models.profile import Profile
from labnotify.models.notification_setting import NotificationSetting
from labnotify.models.notification import Notification
from labnotify.models.notification_log import NotificationLog
from labnotify.models.send_log import SmsLog, WhatsAppLog

__all__ = [
    "NotificationType", "Channel", "DeliveryStatus", "CHANNEL_ORDER",
    "Profile", "NotificationSetting", "Notification", "NotificationLog",
    "SmsLog", "WhatsAppLog",
]
