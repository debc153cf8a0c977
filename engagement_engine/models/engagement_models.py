"""
Core data models for the engagement analytics engine.

These models define the structure of tracked engagement events, aggregation
windows, and the derived analytics returned to the owner dashboard.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """Closed vocabulary of tracked listing interactions"""
    VIEW = "view"
    PHONE_CLICK = "phone_click"
    WEBSITE_CLICK = "website_click"
    BOOKING_CLICK = "booking_click"
    DIRECTIONS_CLICK = "directions_click"
    EMAIL_CLICK = "email_click"
    HOURS_VIEW = "hours_view"
    SERVICES_EXPAND = "services_expand"
    PHOTO_VIEW = "photo_view"


class Period(str, Enum):
    """Dashboard reporting periods"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class DeviceType(str, Enum):
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


CLICK_EVENT_TYPES = frozenset({
    EventType.PHONE_CLICK,
    EventType.WEBSITE_CLICK,
    EventType.BOOKING_CLICK,
    EventType.DIRECTIONS_CLICK,
    EventType.EMAIL_CLICK,
})

# Primary contact actions counted towards conversion
CONVERSION_EVENT_TYPES = frozenset({
    EventType.PHONE_CLICK,
    EventType.WEBSITE_CLICK,
    EventType.BOOKING_CLICK,
})


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the dashboard UI"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Event models (ingestion)

class EventLocation(CamelModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class EventData(CamelModel):
    """
    Structured event payload.

    search_query on a non-view event is the search context carried over from
    the results page the visitor clicked through from.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    source: Optional[str] = None
    search_query: Optional[str] = None
    device_type: Optional[str] = None
    clicked_url: Optional[str] = None
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    # Pass-through: marks events generated for demo listings, kept in the stored payload
    sample_data_id: Optional[str] = None
    location: Optional[EventLocation] = None


class EngagementEvent(CamelModel):
    """One recorded user interaction with a business listing"""
    model_config = ConfigDict(frozen=True)

    event_id: str = Field(
        default_factory=lambda: str(uuid4()),
        validation_alias=AliasChoices("eventId", "event_id", "id"),
    )
    business_id: str
    business_name: str = ""
    # Plain string: stored rows may carry legacy types outside EventType
    event_type: str
    event_data: EventData = Field(default_factory=EventData)
    timestamp: datetime
    session_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("sessionId", "userSessionId", "session_id", "user_session_id"),
    )
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @field_validator("event_data", mode="before")
    @classmethod
    def event_data_default(cls, v):
        return {} if v is None else v

    @field_validator("timestamp")
    @classmethod
    def timestamp_aware(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def known_type(self) -> Optional[EventType]:
        """EventType member, or None for types outside the vocabulary"""
        try:
            return EventType(self.event_type)
        except ValueError:
            return None


# Window models

class AnalyticsWindow(CamelModel):
    """Concrete [start_date, end_date] range for one aggregation call"""
    business_id: Optional[str] = None
    period: Period
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def start_before_end(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


# Analytics result models (derived, never persisted)

class AnalyticsMetrics(CamelModel):
    total_views: int = 0
    unique_views: int = 0
    phone_clicks: int = 0
    website_clicks: int = 0
    booking_clicks: int = 0
    directions_clicks: int = 0
    email_clicks: int = 0
    hours_views: int = 0
    services_expands: int = 0
    photo_views: int = 0
    conversion_rate: float = 0.0
    engagement_rate: float = 0.0


class SourceStat(CamelModel):
    source: str
    views: int
    percentage: float


class SearchQueryStat(CamelModel):
    query: str
    views: int
    clicks: int


class DeviceBreakdown(CamelModel):
    mobile: int = 0
    tablet: int = 0
    desktop: int = 0


class HourlyBucket(CamelModel):
    hour: int = Field(ge=0, le=23)
    views: int = 0
    interactions: int = 0


def _empty_hours() -> List[HourlyBucket]:
    return [HourlyBucket(hour=hour) for hour in range(24)]


class BusinessAnalytics(CamelModel):
    """Windowed performance metrics for one business"""
    business_id: str
    period: Period
    start_date: datetime
    end_date: datetime
    metrics: AnalyticsMetrics = Field(default_factory=AnalyticsMetrics)
    top_sources: List[SourceStat] = Field(default_factory=list)
    top_search_queries: List[SearchQueryStat] = Field(default_factory=list)
    device_breakdown: DeviceBreakdown = Field(default_factory=DeviceBreakdown)
    hourly_distribution: List[HourlyBucket] = Field(default_factory=_empty_hours)


# Overview models (admin dashboard)

class BusinessPerformance(CamelModel):
    business_id: str
    business_name: str
    total_clicks: int
    phone_clicks: int
    website_clicks: int
    booking_clicks: int
    conversion_rate: float


class ClickTypeBreakdown(CamelModel):
    phone: int = 0
    website: int = 0
    booking: int = 0
    directions: int = 0
    email: int = 0


class OverallAnalytics(CamelModel):
    """Cross-business engagement summary for one window"""
    period: Period
    start_date: datetime
    end_date: datetime
    total_click_events: int = 0
    total_unique_visitors: int = 0
    average_conversion_rate: float = 0.0
    active_businesses: int = 0
    top_performing_businesses: List[BusinessPerformance] = Field(default_factory=list)
    device_breakdown: DeviceBreakdown = Field(default_factory=DeviceBreakdown)
    click_type_breakdown: ClickTypeBreakdown = Field(default_factory=ClickTypeBreakdown)


# Service response models

class TrackResult(BaseModel):
    """Outcome of one track() call, for logging and tests"""
    accepted: bool
    stored_in: Optional[str] = None
    reason: Optional[str] = None


class TrackResponse(BaseModel):
    success: bool = True
    message: str = "Engagement tracked"
