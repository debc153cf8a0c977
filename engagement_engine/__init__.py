"""
Engagement Analytics Engine

Turns listing interaction events (views, contact clicks, panel expansions)
into windowed performance metrics for business owners and admins.
"""

from .models import (
    EventType,
    Period,
    EngagementEvent,
    EventData,
    AnalyticsWindow,
    BusinessAnalytics,
    OverallAnalytics,
)
from .errors import (
    EngagementEngineError,
    TransientStoreError,
    EventValidationError,
    InvalidWindowError,
)
from .config import EngineConfig
from .store import EventStore, MemoryEventStore, DatabaseEventStore
from .aggregation import resolve_window, aggregate, aggregate_overview, empty_analytics
from .service.resilience import ResilientAnalyticsService, build_service
from .client import EngagementApiClient

__version__ = "1.0.0"

__all__ = [
    # Models
    "EventType",
    "Period",
    "EngagementEvent",
    "EventData",
    "AnalyticsWindow",
    "BusinessAnalytics",
    "OverallAnalytics",
    # Errors
    "EngagementEngineError",
    "TransientStoreError",
    "EventValidationError",
    "InvalidWindowError",
    # Config
    "EngineConfig",
    # Stores
    "EventStore",
    "MemoryEventStore",
    "DatabaseEventStore",
    # Aggregation
    "resolve_window",
    "aggregate",
    "aggregate_overview",
    "empty_analytics",
    # Service
    "ResilientAnalyticsService",
    "build_service",
    # Client
    "EngagementApiClient",
]
