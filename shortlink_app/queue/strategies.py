"""
Queue strategies using Strategy Pattern.
Allows switching between different queue backends (Redis Streams, In-Memory).
"""

import json
import logging
import socket
from abc import ABC, abstractmethod
from collections import deque
from typing import Dict, List

from .models import VisitEvent

logger = logging.getLogger(__name__)


class QueueStrategy(ABC):
    """
    Abstract base class for queue strategies.

    The redirect handler publishes, the visit worker consumes.
    """

    @abstractmethod
    async def publish(self, queue_name: str, message: VisitEvent) -> bool:
        """
        Publish a message to the queue.

        Returns:
            True if successful, False otherwise
        """

    @abstractmethod
    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[VisitEvent]:
        """
        Consume messages from the queue.

        Args:
            queue_name: Name of the queue
            batch_size: Maximum number of messages to retrieve
            block_time: Time to wait for messages (milliseconds)
        """

    @abstractmethod
    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        """Acknowledge messages (mark as processed)."""

    @abstractmethod
    async def get_queue_length(self, queue_name: str) -> int:
        """Get the number of pending messages in queue."""


class RedisStreamQueue(QueueStrategy):
    """
    Redis Streams implementation.

    1. Producer publishes messages using XADD
    2. Consumer reads messages using XREADGROUP
    3. Consumer acknowledges messages using XACK

    Unacknowledged messages stay in the group's pending list. consume only
    reads new entries, so replaying them takes an XCLAIM.
    """

    def __init__(self, redis_client, consumer_group: str = "visit_workers"):
        self.redis = redis_client
        self.consumer_group = consumer_group
        self.consumer_name = f"worker-{socket.gethostname()}-{id(self)}"
        self._initialized_streams = set()

    def _ensure_stream_exists(self, queue_name: str):
        """Create stream and consumer group on first use."""
        if queue_name in self._initialized_streams:
            return

        try:
            self.redis.xgroup_create(
                name=queue_name,
                groupname=self.consumer_group,
                id='0',
                mkstream=True
            )
            logger.info("Created Redis stream %s", queue_name)
        except Exception as e:
            # Group already exists
            if "BUSYGROUP" not in str(e):
                raise

        self._initialized_streams.add(queue_name)

    async def publish(self, queue_name: str, message: VisitEvent) -> bool:
        try:
            self._ensure_stream_exists(queue_name)
            self.redis.xadd(queue_name, {'data': message.model_dump_json()})
            return True
        except Exception as e:
            logger.warning("Redis publish error: %s", e)
            return False

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[VisitEvent]:
        """
        Read messages never delivered to this group ('>').
        Messages are not removed until acknowledged.
        """
        try:
            self._ensure_stream_exists(queue_name)

            messages = self.redis.xreadgroup(
                groupname=self.consumer_group,
                consumername=self.consumer_name,
                streams={queue_name: '>'},
                count=batch_size,
                block=block_time
            )
        except Exception as e:
            logger.error("Redis consume error: %s", e)
            return []

        if not messages:
            return []

        events = []
        for _stream_name, stream_messages in messages:
            for message_id, message_data in stream_messages:
                try:
                    data = json.loads(message_data[b'data'].decode('utf-8'))
                    event = VisitEvent(**data)
                    event.message_id = message_id.decode('utf-8')
                    events.append(event)
                except Exception as e:
                    logger.warning("Failed to parse message %s: %s", message_id, e)

        return events

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        if not message_ids:
            return True

        try:
            self.redis.xack(queue_name, self.consumer_group, *message_ids)
            return True
        except Exception as e:
            logger.error("Redis ack error: %s", e)
            return False

    async def get_queue_length(self, queue_name: str) -> int:
        try:
            info = self.redis.xinfo_stream(queue_name)
            return info['length']
        except Exception:
            return 0


class InMemoryQueue(QueueStrategy):
    """
    In-memory queue backed by deques.

    Not persistent and not shared between processes, so only useful when the
    worker runs in the same process (tests, local experiments).
    """

    def __init__(self):
        self._queues: Dict[str, deque] = {}

    def _get_queue(self, queue_name: str) -> deque:
        if queue_name not in self._queues:
            self._queues[queue_name] = deque()
        return self._queues[queue_name]

    async def publish(self, queue_name: str, message: VisitEvent) -> bool:
        self._get_queue(queue_name).append(message)
        return True

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[VisitEvent]:
        """block_time is ignored, an empty queue returns immediately."""
        queue = self._get_queue(queue_name)
        messages = []
        while queue and len(messages) < batch_size:
            messages.append(queue.popleft())
        return messages

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        # Messages are removed on consume
        return True

    async def get_queue_length(self, queue_name: str) -> int:
        return len(self._get_queue(queue_name))
