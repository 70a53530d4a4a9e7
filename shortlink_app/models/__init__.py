"""
Database models for the short link service.

Both tables live in the same relational store: ``links`` holds the
mappings, ``logs`` is the append-only visit record.
"""

from .link import Link, LINK_ACTIVE
from .log import LogEntry

__all__ = ["Link", "LINK_ACTIVE", "LogEntry"]
