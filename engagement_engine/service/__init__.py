"""Engagement tracking and analytics service"""

from .main import app
from .resilience import ResilientAnalyticsService, build_service
from .ingest import parse_event, validate_event, detect_device_type

__all__ = [
    "app",
    "ResilientAnalyticsService",
    "build_service",
    "parse_event",
    "validate_event",
    "detect_device_type",
]
