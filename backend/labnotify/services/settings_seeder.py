import logging
from sqlalchemy import select
from labnotify.database import async_session_factory
from labnotify.models.notification_setting import NotificationSetting

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = [
    {
        "notification_type": "booking_confirmed",
        "template_title": "Booking Confirmed",
        "template_message": "Your home sample collection for {{test_names}} is booked for {{date}} at {{time}}.",
    },
    {
        "notification_type": "sample_assigned",
        "template_title": "Collection Agent Assigned",
        "template_message": "{{staffName}} will collect your samples for {{test_names}} on {{date}} at {{time}}.",
    },
    {
        "notification_type": "sample_collected",
        "template_title": "Sample Collected",
        "template_message": "Your samples for {{test_names}} have been collected and are on their way to the lab.",
    },
    {
        "notification_type": "processing_started",
        "template_title": "Processing Started",
        "template_message": "The lab has started processing your samples for {{test_names}}.",
    },
    {
        "notification_type": "report_ready",
        "template_title": "Report Ready",
        "template_message": "Your test report for {{test_names}} is ready. You can download it from your dashboard.",
    },
    {
        "notification_type": "appointment_confirmed",
        "template_title": "Appointment Confirmed",
        "template_message": "Your appointment with {{doctor_name}} is confirmed for {{date}} at {{time}}.",
    },
    {
        "notification_type": "appointment_cancelled",
        "template_title": "Appointment Cancelled",
        "template_message": "Your appointment with {{doctor_name}} on {{date}} at {{time}} has been cancelled.",
    },
]


async def seed_default_settings(session_factory=None):
    """Insert a settings row for every event type that has none.

    Existing rows are never touched, so operator edits survive restarts.
    """
    session_factory = session_factory or async_session_factory
    async with session_factory() as session:
        for setting_data in DEFAULT_SETTINGS:
            result = await session.execute(
                select(NotificationSetting).where(
                    NotificationSetting.notification_type == setting_data["notification_type"]
                )
            )
            existing = result.scalar_one_or_none()
            if not existing:
                session.add(NotificationSetting(
                    in_app_enabled=True,
                    sms_enabled=False,
                    whatsapp_enabled=False,
                    email_enabled=False,
                    **setting_data,
                ))
                logger.info(f"Seeded notification settings: {setting_data['notification_type']}")
        await session.commit()
