"""Engagement analytics engine models"""

from .engagement_models import (
    EventType,
    Period,
    DeviceType,
    CLICK_EVENT_TYPES,
    CONVERSION_EVENT_TYPES,
    EventLocation,
    EventData,
    EngagementEvent,
    AnalyticsWindow,
    AnalyticsMetrics,
    SourceStat,
    SearchQueryStat,
    DeviceBreakdown,
    HourlyBucket,
    BusinessAnalytics,
    BusinessPerformance,
    ClickTypeBreakdown,
    OverallAnalytics,
    TrackResult,
    TrackResponse,
)

__all__ = [
    "EventType",
    "Period",
    "DeviceType",
    "CLICK_EVENT_TYPES",
    "CONVERSION_EVENT_TYPES",
    "EventLocation",
    "EventData",
    "EngagementEvent",
    "AnalyticsWindow",
    "AnalyticsMetrics",
    "SourceStat",
    "SearchQueryStat",
    "DeviceBreakdown",
    "HourlyBucket",
    "BusinessAnalytics",
    "BusinessPerformance",
    "ClickTypeBreakdown",
    "OverallAnalytics",
    "TrackResult",
    "TrackResponse",
]
