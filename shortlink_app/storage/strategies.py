"""
Visit storage strategies using Strategy Pattern.

- SQLVisitStorage: rows in the ``logs`` table of the main database
- NullVisitStorage: visit logging switched off
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List

from sqlalchemy.orm import Session

from shortlink_app.models.log import LogEntry
from shortlink_app.queue.models import VisitEvent

logger = logging.getLogger(__name__)


class VisitStorageStrategy(ABC):
    """
    Where visit records end up.

    Implementations raise on failure; deciding whether a failure matters is
    up to the caller (the recorder swallows it, the worker leaves the batch
    unacknowledged).
    """

    @abstractmethod
    async def store_visits(self, events: List[VisitEvent]) -> int:
        """
        Store visit events in one batch.

        Returns:
            Number of rows written
        """

    async def store_visit(self, event: VisitEvent) -> int:
        return await self.store_visits([event])


class SQLVisitStorage(VisitStorageStrategy):
    """
    Appends ``LogEntry`` rows through SQLAlchemy.

    Opens its own session per batch: visits are written after the request's
    session has already been closed.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def store_visits(self, events: List[VisitEvent]) -> int:
        if not events:
            return 0

        db = self.session_factory()
        try:
            db.add_all([
                LogEntry(
                    url=event.url,
                    slug=event.slug,
                    referer=event.referer,
                    ua=event.ua,
                    ip=event.ip,
                )
                for event in events
            ])
            db.commit()
            return len(events)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class NullVisitStorage(VisitStorageStrategy):
    """Discards every visit."""

    async def store_visits(self, events: List[VisitEvent]) -> int:
        logger.debug("Discarding %d visit(s)", len(events))
        return 0
