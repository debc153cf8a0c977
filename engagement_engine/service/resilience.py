"""
Resilient tracking and analytics service.

Orchestrates window resolution, the event stores and the aggregation engine,
and owns the durable -> in-memory fallback policy:

- track() never raises: durable append, else memory append, else log.
- get_analytics()/get_overview() never raise for storage failures: durable
  read, else memory read, else a zeroed result for the resolved window.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Union

from ..aggregation.engine import aggregate, empty_analytics
from ..aggregation.overview import aggregate_overview, empty_overview
from ..aggregation.window import resolve_window
from ..config import EngineConfig
from ..errors import EventValidationError
from ..models.engagement_models import (
    BusinessAnalytics,
    EngagementEvent,
    OverallAnalytics,
    Period,
    TrackResult,
    utc_now,
)
from ..store.base import EventStore
from ..store.database import DatabaseEventStore
from ..store.memory import MemoryEventStore
from .ingest import parse_event, validate_event
from .metrics import AGGREGATION_LATENCY, ANALYTICS_QUERIES, STORE_ERRORS, TRACK_EVENTS

logger = logging.getLogger(__name__)


class ResilientAnalyticsService:
    """Two-tier tracking and analytics over a durable and a memory store"""

    def __init__(
        self,
        durable: Optional[EventStore],
        ephemeral: EventStore,
        config: EngineConfig = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.durable = durable
        self.ephemeral = ephemeral
        self.config = config or EngineConfig()
        self.clock = clock

    # ==================== TRACKING ====================

    async def track(
        self,
        event: Union[EngagementEvent, Mapping[str, Any]],
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None
    ) -> TrackResult:
        """
        Record one engagement event. Never raises.

        Args:
            event: Parsed event or raw tracking payload
            user_agent: User-Agent observed by the server, for raw payloads
            ip_address: Client address observed by the server, for raw payloads

        Returns:
            TrackResult describing where (or whether) the event was stored
        """
        if not self.config.tracking_enabled:
            TRACK_EVENTS.labels(outcome='disabled').inc()
            logger.debug("Tracking disabled, event not recorded")
            return TrackResult(accepted=False, reason="tracking disabled")

        try:
            if isinstance(event, EngagementEvent):
                event = validate_event(event)
            else:
                event = parse_event(event, user_agent=user_agent, ip_address=ip_address)
        except EventValidationError as e:
            TRACK_EVENTS.labels(outcome='dropped').inc()
            logger.warning(f"Dropping engagement event: {e}")
            return TrackResult(accepted=False, reason=str(e))

        if self.durable is not None:
            try:
                await self._bounded(self.durable.append(event))
                TRACK_EVENTS.labels(outcome='durable').inc()
                return TrackResult(accepted=True, stored_in=self.durable.name)
            except Exception as e:
                self._store_failed(self.durable, "append", e)

        try:
            await self._bounded(self.ephemeral.append(event))
            TRACK_EVENTS.labels(outcome='fallback').inc()
            return TrackResult(accepted=True, stored_in=self.ephemeral.name)
        except Exception as e:
            self._store_failed(self.ephemeral, "append", e)

        TRACK_EVENTS.labels(outcome='lost').inc()
        logger.error(f"Engagement event {event.event_id} lost: every store failed")
        return TrackResult(accepted=False, reason="all stores failed")

    # ==================== ANALYTICS ====================

    async def get_analytics(
        self,
        business_id: str,
        period: Union[Period, str] = Period.WEEK,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> BusinessAnalytics:
        """
        Windowed analytics for one business.

        Raises:
            InvalidWindowError: if the requested window is invalid
        """
        window = resolve_window(
            period, start_date, end_date, business_id=business_id, now=self.clock
        )

        def build(events: List[EngagementEvent]) -> BusinessAnalytics:
            return aggregate(
                events,
                window,
                tz=self.config.tz,
                attribute_query_clicks=self.config.attribute_query_clicks
            )

        return await self._read_with_fallback(
            kind="business",
            operation="query",
            fetch=lambda store: store.query(business_id, window.start_date, window.end_date),
            build=build,
            empty=lambda: empty_analytics(window)
        )

    async def get_overview(
        self,
        period: Union[Period, str] = Period.WEEK,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> OverallAnalytics:
        """
        Windowed analytics across every business.

        Raises:
            InvalidWindowError: if the requested window is invalid
        """
        window = resolve_window(period, start_date, end_date, now=self.clock)

        def build(events: List[EngagementEvent]) -> OverallAnalytics:
            return aggregate_overview(
                events,
                window,
                tz=self.config.tz,
                attribute_query_clicks=self.config.attribute_query_clicks
            )

        return await self._read_with_fallback(
            kind="overview",
            operation="query_range",
            fetch=lambda store: store.query_range(window.start_date, window.end_date),
            build=build,
            empty=lambda: empty_overview(window)
        )

    async def _read_with_fallback(
        self,
        kind: str,
        operation: str,
        fetch: Callable[[EventStore], Awaitable[List[EngagementEvent]]],
        build: Callable[[List[EngagementEvent]], Any],
        empty: Callable[[], Any]
    ):
        for store in self._read_stores():
            started = time.perf_counter()
            try:
                events = await self._bounded(fetch(store))
                result = build(events)
            except Exception as e:
                self._store_failed(store, operation, e)
                continue

            AGGREGATION_LATENCY.labels(kind=kind, source=store.name).observe(
                time.perf_counter() - started
            )
            ANALYTICS_QUERIES.labels(kind=kind, source=store.name).inc()
            return result

        ANALYTICS_QUERIES.labels(kind=kind, source='empty').inc()
        logger.error(f"All event stores failed for {kind} analytics, returning empty result")
        return empty()

    # ==================== HELPERS ====================

    def _read_stores(self) -> List[EventStore]:
        stores = [self.ephemeral]
        if self.durable is not None:
            stores.insert(0, self.durable)
        return stores

    async def _bounded(self, call: Awaitable):
        return await asyncio.wait_for(call, timeout=self.config.store_timeout_seconds)

    def _store_failed(self, store: EventStore, operation: str, error: Exception):
        STORE_ERRORS.labels(store=store.name, operation=operation).inc()
        if isinstance(error, asyncio.TimeoutError):
            logger.warning(
                f"{store.name} {operation} timed out after {self.config.store_timeout_seconds}s"
            )
        else:
            logger.warning(f"{store.name} {operation} failed: {error}")

    def status(self) -> dict:
        """Store wiring for the health endpoint"""
        durable_status = None
        if self.durable is not None:
            durable_status = {
                "name": self.durable.name,
                "connected": getattr(self.durable, "pool", True) is not None,
            }
        buffered = len(self.ephemeral) if hasattr(self.ephemeral, "__len__") else None
        return {
            "tracking_enabled": self.config.tracking_enabled,
            "durable": durable_status,
            "ephemeral": {"name": self.ephemeral.name, "buffered_events": buffered},
        }

    async def close(self):
        if isinstance(self.durable, DatabaseEventStore):
            await self.durable.disconnect()


def build_service(config: EngineConfig = None) -> ResilientAnalyticsService:
    """Wire the Postgres store and a bounded memory store from config"""
    config = config or EngineConfig.from_env()
    durable = DatabaseEventStore(
        connection_string=config.database_url,
        min_size=config.db_min_pool,
        max_size=config.db_max_pool,
        command_timeout=config.store_timeout_seconds
    )
    ephemeral = MemoryEventStore(capacity=config.memory_capacity)
    return ResilientAnalyticsService(durable=durable, ephemeral=ephemeral, config=config)
