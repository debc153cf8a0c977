"""Window resolution and engagement aggregation"""

from .window import resolve_window, PERIOD_DELTAS
from .engine import aggregate, empty_analytics, TOP_N
from .overview import aggregate_overview, empty_overview

__all__ = [
    "resolve_window",
    "PERIOD_DELTAS",
    "aggregate",
    "empty_analytics",
    "TOP_N",
    "aggregate_overview",
    "empty_overview",
]
