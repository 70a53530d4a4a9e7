"""
FastAPI dependencies for dependency injection.

Provides the link service and the visit recorder. Tests override
``get_db``, ``get_settings`` and ``get_visit_recorder``.
"""

import logging
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from shortlink_app.config import Settings, get_settings, settings
from shortlink_app.database.connection import get_db
from shortlink_app.queue.factory import QueueBackend, QueueFactory
from shortlink_app.services.link_service import LinkService
from shortlink_app.services.slugs import RandomSlugGenerator
from shortlink_app.services.visit_recorder import VisitRecorder
from shortlink_app.storage.factory import VisitStorageBackend, VisitStorageFactory
from shortlink_app.storage.strategies import NullVisitStorage

logger = logging.getLogger(__name__)


@lru_cache()
def get_visit_recorder() -> VisitRecorder:
    """
    Visit recorder for the configured backend (singleton).

    ``redis_streams`` falls back to direct database writes when Redis can't
    be reached at startup: an in-process queue would have no consumer.
    A backend that can't be built at all turns visit logging off, so
    redirects keep working.
    """
    backend = settings.visit_log_backend

    if backend == "redis_streams":
        try:
            queue = QueueFactory.create(QueueBackend.REDIS_STREAMS)
        except Exception as e:
            logger.warning("Redis connection failed (%s), writing visits to the database directly", e)
        else:
            return VisitRecorder(queue=queue, queue_name=settings.queue_name)
        backend = VisitStorageBackend.DATABASE.value

    try:
        storage = VisitStorageFactory.create(VisitStorageBackend(backend))
    except Exception as e:
        logger.warning("Visit log backend %r unavailable (%s), visits will not be logged", backend, e)
        storage = NullVisitStorage()
    return VisitRecorder(storage=storage)


def get_link_service(
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
) -> LinkService:
    """LinkService bound to the request's session."""
    return LinkService(db=db, slug_generator=RandomSlugGenerator(app_settings.slug_length))
