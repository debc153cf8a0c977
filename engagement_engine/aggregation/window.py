"""
Window resolution for analytics queries.

Month and year windows use calendar arithmetic: subtracting a month from the
31st lands on the last day of the shorter month (31 Mar -> 28/29 Feb), and a
year before 29 Feb is 28 Feb.
"""

from datetime import datetime
from typing import Callable, Optional, Union

from dateutil.relativedelta import relativedelta

from ..errors import InvalidWindowError
from ..models.engagement_models import AnalyticsWindow, Period, as_utc, utc_now

PERIOD_DELTAS = {
    Period.DAY: relativedelta(days=1),
    Period.WEEK: relativedelta(days=7),
    Period.MONTH: relativedelta(months=1),
    Period.YEAR: relativedelta(years=1),
}


def resolve_window(
    period: Union[Period, str],
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    business_id: Optional[str] = None,
    now: Callable[[], datetime] = utc_now
) -> AnalyticsWindow:
    """
    Turn a (period, start?, end?) request into a concrete window.

    Args:
        period: Reporting period, used only when start_date is omitted
        start_date: Explicit window start
        end_date: Explicit window end, defaults to now
        business_id: Business the window belongs to (None for overviews)
        now: Clock, injectable for tests

    Returns:
        AnalyticsWindow with timezone-aware bounds

    Raises:
        InvalidWindowError: if the period is unknown or start is after end
    """
    try:
        period = Period(period)
    except ValueError:
        raise InvalidWindowError(f"Unknown period: {period}")

    end = as_utc(end_date) if end_date is not None else now()
    start = as_utc(start_date) if start_date is not None else end - PERIOD_DELTAS[period]

    if start > end:
        raise InvalidWindowError(
            f"Window start {start.isoformat()} is after end {end.isoformat()}"
        )

    return AnalyticsWindow(
        business_id=business_id,
        period=period,
        start_date=start,
        end_date=end
    )
