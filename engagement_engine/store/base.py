"""
Event store capability shared by the durable and in-memory adapters.

The aggregation engine only ever sees the lists these adapters return, so any
adapter satisfying this contract can back the dashboard.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from ..models.engagement_models import EngagementEvent


class EventStore(ABC):
    """Append-only engagement event store"""

    name: str = "store"

    @abstractmethod
    async def append(self, event: EngagementEvent) -> None:
        """Persist or buffer one event. Raises TransientStoreError on failure."""

    @abstractmethod
    async def query(self, business_id: str, start: datetime, end: datetime) -> List[EngagementEvent]:
        """Events of one business with start <= timestamp <= end, as a new list"""

    @abstractmethod
    async def query_range(self, start: datetime, end: datetime) -> List[EngagementEvent]:
        """Events of every business with start <= timestamp <= end, as a new list"""
