import asyncio
import json
import logging
from datetime import datetime

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from labnotify.services.notification_bus import bus

logger = logging.getLogger(__name__)

websocket_router = APIRouter()


async def _forward(websocket: WebSocket, queue: asyncio.Queue):
    while True:
        message = await queue.get()
        await websocket.send_text(json.dumps(message, default=str))


@websocket_router.websocket("/ws/notifications/{recipient_id}")
async def notification_stream(websocket: WebSocket, recipient_id: str):
    """Live feed for one recipient: new notifications and read marks."""
    await websocket.accept()
    queue = bus.subscribe(recipient_id)
    logger.info(f"Notification stream opened for {recipient_id}")
    sender = asyncio.create_task(_forward(websocket, queue))
    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue
            if isinstance(msg, dict) and msg.get("action") == "ping":
                await websocket.send_text(json.dumps({
                    "event": "pong",
                    "timestamp": datetime.utcnow().isoformat(),
                    "data": {},
                }))
    except WebSocketDisconnect:
        pass
    finally:
        sender.cancel()
        bus.unsubscribe(recipient_id, queue)
        logger.info(f"Notification stream closed for {recipient_id}")
