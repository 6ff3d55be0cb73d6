"""
Async Pub/Sub Event Bus

Lets the refresh scheduler announce each new snapshot without knowing who is
listening. Every WebSocket client of /ws/snapshot owns one subscriber queue.

Topics:
    - "snapshot": Snapshot.model_dump(mode="json") after every successful cycle
"""

import asyncio
from collections import defaultdict
from typing import Any, DefaultDict, Dict, Set

from core.logging import get_logger


SNAPSHOT_TOPIC = "snapshot"


class EventBus:
    """
    Topic-based pub/sub over asyncio queues.

    - Publishing never blocks: a full subscriber queue drops the event.
    - Subscribers must unsubscribe when done, or their queue leaks.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self._topics: DefaultDict[str, Set[asyncio.Queue]] = defaultdict(set)
        self._max_queue_size = max_queue_size
        self._logger = get_logger(__name__)

    def subscriber_count(self, topic: str) -> int:
        return len(self._topics.get(topic, ()))

    async def subscribe(self, topic: str) -> asyncio.Queue:
        """Register a new queue on ``topic`` and return it."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._topics[topic].add(queue)
        self._logger.debug(f"Subscriber added to '{topic}'. total={self.subscriber_count(topic)}")
        return queue

    async def unsubscribe(self, topic: str, queue: asyncio.Queue) -> None:
        """Remove ``queue`` from ``topic``; unknown queues are ignored."""
        self._topics.get(topic, set()).discard(queue)
        self._logger.debug(f"Subscriber removed from '{topic}'. total={self.subscriber_count(topic)}")

    async def publish(self, topic: str, event: Dict[str, Any]) -> None:
        """Deliver ``event`` to every current subscriber of ``topic``."""
        for queue in list(self._topics.get(topic, ())):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                self._logger.warning(f"Dropping '{topic}' event for a slow subscriber")


# Singleton event bus for the application
bus = EventBus()
