"""
Visit Log Worker

Drains visit events published by the redirect handler (``visit_log_backend =
redis_streams``) and appends them to the ``logs`` table in batches.

Messages are acknowledged only after the batch was written. A failed write
leaves them pending in the consumer group. They are not read again by this
worker and need a manual XCLAIM to be replayed.
"""

import asyncio
import logging
import signal
import sys
from typing import List

from shortlink_app.config import settings
from shortlink_app.logging_config import setup_logging
from shortlink_app.queue.models import VisitEvent
from shortlink_app.queue.strategies import QueueStrategy
from shortlink_app.storage.strategies import VisitStorageStrategy

logger = logging.getLogger(__name__)


class VisitLogWorker:
    """Batch consumer moving visit events from a queue into storage."""

    def __init__(
        self,
        queue: QueueStrategy,
        storage: VisitStorageStrategy,
        queue_name: str = settings.queue_name,
        batch_size: int = settings.queue_batch_size,
        block_time: int = 1000,
    ):
        self.queue = queue
        self.storage = storage
        self.queue_name = queue_name
        self.batch_size = batch_size
        self.block_time = block_time
        self.running = False
        self.processed_count = 0

    async def start(self):
        """Run until stopped by a signal or ``stop()``."""
        self.running = True
        logger.info("Visit log worker started (batch size %d)", self.batch_size)

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        while self.running:
            try:
                await self.process_batch()
            except asyncio.CancelledError:
                logger.info("Worker task cancelled")
                break
            except Exception:
                logger.exception("Error processing batch")
                await asyncio.sleep(1)

        logger.info("Visit log worker stopped after %d visits", self.processed_count)

    async def process_batch(self) -> int:
        """
        Consume one batch, store it, then acknowledge it.

        Returns:
            Number of visits written. Storage errors propagate and the
            batch stays unacknowledged.
        """
        messages: List[VisitEvent] = await self.queue.consume(
            self.queue_name,
            batch_size=self.batch_size,
            block_time=self.block_time,
        )
        if not messages:
            return 0

        written = await self.storage.store_visits(messages)

        message_ids = [msg.message_id for msg in messages if msg.message_id]
        if message_ids:
            await self.queue.ack(self.queue_name, message_ids)

        self.processed_count += len(messages)
        logger.debug("Stored %d visits, total %d", len(messages), self.processed_count)
        return written

    def _signal_handler(self, signum, frame):
        logger.info("Received signal %s, shutting down", signum)
        self.stop()

    def stop(self):
        self.running = False


async def main():
    """
    Entry point.

    Usage:
        python -m shortlink_app.hit_processor.visit_worker
    """
    setup_logging(settings.log_level)
    logger.info(
        "Visit log worker: environment=%s queue=%s", settings.environment, settings.queue_name
    )

    from shortlink_app.queue.factory import QueueBackend, QueueFactory
    from shortlink_app.storage.factory import VisitStorageBackend, VisitStorageFactory

    queue = QueueFactory.create(QueueBackend.REDIS_STREAMS)
    storage = VisitStorageFactory.create(VisitStorageBackend.DATABASE)

    worker = VisitLogWorker(queue=queue, storage=storage)

    try:
        await worker.start()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
