import asyncio
import logging
from datetime import datetime
from typing import Dict, Set

logger = logging.getLogger(__name__)


class NotificationBus:
    """In-process publish/subscribe keyed by recipient id.

    The dispatcher publishes ``notification.created`` after the insert is
    committed; feed consumers (WebSocket clients, status trackers) each get
    their own queue.
    """

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self.subscribers: Dict[str, Set[asyncio.Queue]] = {}

    def subscribe(self, recipient_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self.subscribers.setdefault(recipient_id, set()).add(queue)
        logger.debug(f"Feed subscriber added for {recipient_id}")
        return queue

    def unsubscribe(self, recipient_id: str, queue: asyncio.Queue) -> None:
        queues = self.subscribers.get(recipient_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            self.subscribers.pop(recipient_id, None)

    def subscriber_count(self, recipient_id: str) -> int:
        return len(self.subscribers.get(recipient_id, ()))

    def publish(self, recipient_id: str, event: str, data: dict) -> int:
        """Queue *event* for every subscriber of *recipient_id*; returns deliveries."""
        message = {
            "event": event,
            "timestamp": datetime.utcnow().isoformat(),
            "data": data,
        }
        delivered = 0
        for queue in list(self.subscribers.get(recipient_id, ())):
            try:
                queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(f"Feed subscriber queue full for {recipient_id}, dropping {event}")
        return delivered


bus = NotificationBus()
