"""
Factory for creating visit storage instances.
"""

import logging
from enum import Enum

from .strategies import VisitStorageStrategy, SQLVisitStorage, NullVisitStorage
from shortlink_app.database.connection import SessionLocal

logger = logging.getLogger(__name__)


class VisitStorageBackend(Enum):
    """Available visit storage backends"""
    DATABASE = "database"
    NULL = "null"


class VisitStorageFactory:
    """Factory for visit storage with singleton caching."""

    _instance: VisitStorageStrategy = None

    @classmethod
    def create(cls, backend: VisitStorageBackend) -> VisitStorageStrategy:
        if cls._instance is not None:
            return cls._instance

        if backend == VisitStorageBackend.DATABASE:
            cls._instance = SQLVisitStorage(session_factory=SessionLocal)
        elif backend == VisitStorageBackend.NULL:
            cls._instance = NullVisitStorage()
        else:
            raise ValueError(f"Unknown storage backend: {backend}")

        logger.info("Visit storage initialized: %s", backend.value)
        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
