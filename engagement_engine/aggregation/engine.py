"""
Engagement aggregation engine.

Pure transform from the events of one business in one window to the
BusinessAnalytics shown on the owner dashboard. Both store adapters feed
this single implementation, so durable and fallback reads cannot drift apart.
"""

import logging
from datetime import timezone, tzinfo
from typing import Dict, Iterable, List

from ..models.engagement_models import (
    AnalyticsMetrics,
    AnalyticsWindow,
    BusinessAnalytics,
    CONVERSION_EVENT_TYPES,
    DeviceBreakdown,
    DeviceType,
    EngagementEvent,
    EventType,
    HourlyBucket,
    SearchQueryStat,
    SourceStat,
)

logger = logging.getLogger(__name__)

TOP_N = 10
DEFAULT_SOURCE = "direct"

COUNTER_FIELDS = {
    EventType.VIEW: "total_views",
    EventType.PHONE_CLICK: "phone_clicks",
    EventType.WEBSITE_CLICK: "website_clicks",
    EventType.BOOKING_CLICK: "booking_clicks",
    EventType.DIRECTIONS_CLICK: "directions_clicks",
    EventType.EMAIL_CLICK: "email_clicks",
    EventType.HOURS_VIEW: "hours_views",
    EventType.SERVICES_EXPAND: "services_expands",
    EventType.PHOTO_VIEW: "photo_views",
}

_DEVICES = tuple(d.value for d in DeviceType)


def empty_analytics(window: AnalyticsWindow, business_id: str = None) -> BusinessAnalytics:
    """Zeroed analytics for a window with no (readable) events"""
    return BusinessAnalytics(
        business_id=business_id or window.business_id or "",
        period=window.period,
        start_date=window.start_date,
        end_date=window.end_date
    )


def _event_order(event: EngagementEvent):
    return (event.timestamp, event.event_id)


def _rate(numerator: int, total_views: int) -> float:
    if total_views == 0:
        return 0.0
    return 100.0 * numerator / total_views


def _device_of(event: EngagementEvent) -> str:
    device = (event.event_data.device_type or "").lower()
    return device if device in _DEVICES else DeviceType.DESKTOP.value


def aggregate(
    events: Iterable[EngagementEvent],
    window: AnalyticsWindow,
    tz: tzinfo = timezone.utc,
    attribute_query_clicks: bool = True,
    business_id: str = None
) -> BusinessAnalytics:
    """
    Aggregate engagement events into windowed business analytics.

    Events are assumed to be already filtered to the business and window.
    The counting pass itself is a single O(n) walk, but it is preceded by an
    O(n log n) sort on (timestamp, event_id). Ranking ties resolve by first
    occurrence, and the sort makes "first" mean the same thing whichever store
    answered and in whatever order it returned rows.

    Args:
        events: Engagement events of one business within the window
        window: Window the events were selected with
        tz: Zone used for hour-of-day bucketing
        attribute_query_clicks: Count non-view events carrying a search
            query as clicks for that query
        business_id: Overrides window.business_id in the result

    Returns:
        BusinessAnalytics; fully zeroed when there are no events
    """
    counters = dict.fromkeys(COUNTER_FIELDS.values(), 0)
    sessions = set()
    source_counts: Dict[str, int] = {}
    query_counts: Dict[str, List[int]] = {}  # query -> [views, clicks]
    devices = dict.fromkeys(_DEVICES, 0)
    hourly_views = [0] * 24
    hourly_interactions = [0] * 24
    skipped = 0

    for event in sorted(events, key=_event_order):
        event_type = event.known_type
        if event_type is None:
            skipped += 1
            logger.debug(f"Skipping event {event.event_id} with unknown type {event.event_type!r}")
            continue

        counters[COUNTER_FIELDS[event_type]] += 1
        if event.session_id:
            sessions.add(event.session_id)

        search_query = event.event_data.search_query
        hour = event.timestamp.astimezone(tz).hour

        if event_type is EventType.VIEW:
            source = event.event_data.source or DEFAULT_SOURCE
            source_counts[source] = source_counts.get(source, 0) + 1
            if search_query:
                query_counts.setdefault(search_query, [0, 0])[0] += 1
            hourly_views[hour] += 1
        else:
            if search_query and attribute_query_clicks:
                query_counts.setdefault(search_query, [0, 0])[1] += 1
            hourly_interactions[hour] += 1

        devices[_device_of(event)] += 1

    if skipped:
        logger.warning(f"Ignored {skipped} engagement events with unknown event types")

    total_views = counters["total_views"]
    conversions = sum(counters[COUNTER_FIELDS[t]] for t in CONVERSION_EVENT_TYPES)
    interactions = sum(
        count for field, count in counters.items() if field != "total_views"
    )

    metrics = AnalyticsMetrics(
        **counters,
        unique_views=len(sessions),
        conversion_rate=_rate(conversions, total_views),
        engagement_rate=_rate(interactions, total_views)
    )

    # sorted() is stable: equal counts keep first-seen order
    ranked_sources = sorted(source_counts.items(), key=lambda item: -item[1])[:TOP_N]
    top_sources = [
        SourceStat(source=source, views=views, percentage=_rate(views, total_views))
        for source, views in ranked_sources
    ]

    ranked_queries = sorted(query_counts.items(), key=lambda item: -item[1][0])[:TOP_N]
    top_search_queries = [
        SearchQueryStat(query=query, views=views, clicks=clicks)
        for query, (views, clicks) in ranked_queries
    ]

    hourly_distribution = [
        HourlyBucket(hour=hour, views=hourly_views[hour], interactions=hourly_interactions[hour])
        for hour in range(24)
    ]

    return BusinessAnalytics(
        business_id=business_id or window.business_id or "",
        period=window.period,
        start_date=window.start_date,
        end_date=window.end_date,
        metrics=metrics,
        top_sources=top_sources,
        top_search_queries=top_search_queries,
        device_breakdown=DeviceBreakdown(**devices),
        hourly_distribution=hourly_distribution
    )
