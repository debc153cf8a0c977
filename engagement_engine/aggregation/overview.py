"""Cross-business engagement overview for the admin dashboard."""

from datetime import timezone, tzinfo
from typing import Dict, Iterable, List

from ..models.engagement_models import (
    AnalyticsWindow,
    BusinessPerformance,
    ClickTypeBreakdown,
    DeviceBreakdown,
    EngagementEvent,
    OverallAnalytics,
)
from .engine import TOP_N, aggregate


def empty_overview(window: AnalyticsWindow) -> OverallAnalytics:
    return OverallAnalytics(
        period=window.period,
        start_date=window.start_date,
        end_date=window.end_date
    )


def aggregate_overview(
    events: Iterable[EngagementEvent],
    window: AnalyticsWindow,
    tz: tzinfo = timezone.utc,
    attribute_query_clicks: bool = True
) -> OverallAnalytics:
    """
    Summarize engagement across every business in the window.

    Each business is aggregated with the same engine the owner dashboard
    uses, so per-business numbers match what owners see.
    """
    by_business: Dict[str, List[EngagementEvent]] = {}
    names: Dict[str, str] = {}
    sessions = set()

    # Same canonical order as aggregate(), so names and ranking ties are store-independent
    for event in sorted(events, key=lambda e: (e.timestamp, e.event_id)):
        if event.known_type is None:
            continue
        by_business.setdefault(event.business_id, []).append(event)
        if event.business_name and not names.get(event.business_id):
            names[event.business_id] = event.business_name
        if event.session_id:
            sessions.add(event.session_id)

    if not by_business:
        return empty_overview(window)

    clicks = ClickTypeBreakdown()
    devices = DeviceBreakdown()
    performances: List[BusinessPerformance] = []
    conversion_rates: List[float] = []

    for business_id, business_events in by_business.items():
        analytics = aggregate(
            business_events,
            window,
            tz=tz,
            attribute_query_clicks=attribute_query_clicks,
            business_id=business_id
        )
        m = analytics.metrics

        clicks.phone += m.phone_clicks
        clicks.website += m.website_clicks
        clicks.booking += m.booking_clicks
        clicks.directions += m.directions_clicks
        clicks.email += m.email_clicks

        devices.mobile += analytics.device_breakdown.mobile
        devices.tablet += analytics.device_breakdown.tablet
        devices.desktop += analytics.device_breakdown.desktop

        conversion_rates.append(m.conversion_rate)
        performances.append(BusinessPerformance(
            business_id=business_id,
            business_name=names.get(business_id, ""),
            total_clicks=(
                m.phone_clicks + m.website_clicks + m.booking_clicks
                + m.directions_clicks + m.email_clicks
            ),
            phone_clicks=m.phone_clicks,
            website_clicks=m.website_clicks,
            booking_clicks=m.booking_clicks,
            conversion_rate=m.conversion_rate
        ))

    top_performing = sorted(performances, key=lambda p: -p.total_clicks)[:TOP_N]

    return OverallAnalytics(
        period=window.period,
        start_date=window.start_date,
        end_date=window.end_date,
        total_click_events=(
            clicks.phone + clicks.website + clicks.booking + clicks.directions + clicks.email
        ),
        total_unique_visitors=len(sessions),
        average_conversion_rate=sum(conversion_rates) / len(conversion_rates),
        active_businesses=len(by_business),
        top_performing_businesses=top_performing,
        device_breakdown=devices,
        click_type_breakdown=clicks
    )
