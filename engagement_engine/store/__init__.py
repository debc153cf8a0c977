"""Engagement event store adapters"""

from .base import EventStore
from .memory import MemoryEventStore
from .database import DatabaseEventStore, SCHEMA_SQL

__all__ = ["EventStore", "MemoryEventStore", "DatabaseEventStore", "SCHEMA_SQL"]
