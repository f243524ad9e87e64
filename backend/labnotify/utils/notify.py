import logging
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

# Home-collection status -> event type raised when a request enters it
COLLECTION_STATUS_EVENTS = {
    "requested": None,
    "assigned": "sample_assigned",
    "collected": "sample_collected",
    "processing": "processing_started",
    "ready": "report_ready",
}


async def fire_notification(recipient_id: str, event: str, data: Optional[Dict[str, Any]] = None, **dispatcher_kwargs):
    """Dispatch with its own session and swallow every failure.

    Business-event emitters call this after their own transaction is
    committed; a notification problem must never undo the booking or status
    change that triggered it.
    """
    from labnotify.database import async_session_factory
    try:
        async with async_session_factory() as session:
            from labnotify.services.notification_service import NotificationDispatcher
            dispatcher = NotificationDispatcher(session, **dispatcher_kwargs)
            return await dispatcher.dispatch(recipient_id, event, data or {})
    except Exception as e:
        logger.warning(f"Notification dispatch failed for {event} -> {recipient_id}: {e}")
        return None


def collection_payload(request_id: str, request: Mapping[str, Any]) -> Dict[str, Any]:
    payload = {
        "requestId": request_id,
        "testNames": list(request.get("test_names") or []),
        "date": request.get("preferred_date"),
        "time": request.get("preferred_time"),
    }
    if request.get("staff_name"):
        payload["staffName"] = request["staff_name"]
    return payload


async def notify_collection_status(
    recipient_id: str,
    status: str,
    request_id: str,
    request: Mapping[str, Any],
    **dispatcher_kwargs,
):
    """Raise the event matching a home-collection status change, if any."""
    event = COLLECTION_STATUS_EVENTS.get(status)
    if event is None:
        return None
    return await fire_notification(
        recipient_id, event, collection_payload(request_id, request), **dispatcher_kwargs
    )
