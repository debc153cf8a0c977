"""Prometheus metrics for the engagement service."""

from prometheus_client import Counter, Histogram

TRACK_EVENTS = Counter(
    'engagement_track_events_total',
    'Engagement events received by outcome',
    ['outcome']
)

ANALYTICS_QUERIES = Counter(
    'engagement_analytics_queries_total',
    'Analytics queries by the store that answered them',
    ['kind', 'source']
)

STORE_ERRORS = Counter(
    'engagement_store_errors_total',
    'Event store failures',
    ['store', 'operation']
)

AGGREGATION_LATENCY = Histogram(
    'engagement_aggregation_latency_seconds',
    'Time spent reading and aggregating one analytics window',
    ['kind', 'source'],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)
