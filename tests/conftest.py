"""Shared fixtures for engagement engine tests"""

from datetime import datetime, timezone
from itertools import count

import pytest

from engagement_engine.aggregation.window import resolve_window
from engagement_engine.models.engagement_models import EngagementEvent, Period


WINDOW_START = datetime(2024, 6, 1, tzinfo=timezone.utc)
WINDOW_END = datetime(2024, 6, 8, tzinfo=timezone.utc)


@pytest.fixture
def make_event():
    """Factory for events inside the default test window"""
    ids = count(1)

    def _make(
        event_type="view",
        business_id="B1",
        hour=12,
        day=3,
        session_id=None,
        business_name="",
        **event_data
    ):
        return EngagementEvent(
            event_id=f"evt-{next(ids):04d}",
            business_id=business_id,
            business_name=business_name,
            event_type=event_type,
            event_data=event_data,
            timestamp=datetime(2024, 6, day, hour, 0, tzinfo=timezone.utc),
            session_id=session_id,
        )

    return _make


@pytest.fixture
def window():
    return resolve_window(Period.WEEK, WINDOW_START, WINDOW_END, business_id="B1")
