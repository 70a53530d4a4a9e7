"""
Visit storage module.

Implements the Strategy Pattern for where redirect logs are persisted.
"""

from .strategies import VisitStorageStrategy, SQLVisitStorage, NullVisitStorage
from .factory import VisitStorageFactory, VisitStorageBackend

__all__ = [
    "VisitStorageStrategy",
    "SQLVisitStorage",
    "NullVisitStorage",
    "VisitStorageFactory",
    "VisitStorageBackend",
]
