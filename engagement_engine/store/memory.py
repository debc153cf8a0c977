"""
Bounded in-memory event store.

Best-effort fallback used when the durable store is unavailable. Entries are
lost on restart and the oldest are evicted first once capacity is reached.
"""

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Deque, List

from ..models.engagement_models import EngagementEvent
from .base import EventStore

logger = logging.getLogger(__name__)


class MemoryEventStore(EventStore):
    """FIFO buffer of engagement events guarded by a lock"""

    name = "memory"

    def __init__(self, capacity: int = 1000):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._events: Deque[EngagementEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self.evicted = 0

    async def append(self, event: EngagementEvent) -> None:
        with self._lock:
            if len(self._events) == self.capacity:
                self.evicted += 1
                logger.debug(f"Memory store at capacity ({self.capacity}), evicting oldest event")
            self._events.append(event)

    async def query(self, business_id: str, start: datetime, end: datetime) -> List[EngagementEvent]:
        with self._lock:
            snapshot = list(self._events)
        return [
            e for e in snapshot
            if e.business_id == business_id and start <= e.timestamp <= end
        ]

    async def query_range(self, start: datetime, end: datetime) -> List[EngagementEvent]:
        with self._lock:
            snapshot = list(self._events)
        return [e for e in snapshot if start <= e.timestamp <= end]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def clear(self):
        with self._lock:
            self._events.clear()
            self.evicted = 0
