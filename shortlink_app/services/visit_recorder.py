import logging
from typing import Optional

from shortlink_app.queue.models import VisitEvent
from shortlink_app.queue.strategies import QueueStrategy
from shortlink_app.storage.strategies import VisitStorageStrategy

logger = logging.getLogger(__name__)


class VisitRecorder:
    """
    Best-effort visit logging.

    With a queue configured, events are published and a separate worker
    writes them; otherwise they go straight to storage. ``record`` never
    raises and its outcome never reaches the visitor. Visits in flight when
    the process dies are lost.
    """

    def __init__(
        self,
        storage: Optional[VisitStorageStrategy] = None,
        queue: Optional[QueueStrategy] = None,
        queue_name: str = "link_visits",
    ):
        if storage is None and queue is None:
            raise ValueError("VisitRecorder needs a storage or a queue")
        self.storage = storage
        self.queue = queue
        self.queue_name = queue_name

    async def record(self, event: VisitEvent) -> None:
        try:
            if self.queue is not None:
                if not await self.queue.publish(self.queue_name, event):
                    logger.warning("Dropped visit to %s: queue rejected the event", event.slug)
            else:
                await self.storage.store_visit(event)
        except Exception:
            logger.warning("Dropped visit to %s", event.slug, exc_info=True)
