"""
Engagement Analytics API Client

Client used by listing pages and dashboards to talk to the engagement
service over HTTP.
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional, Union

import httpx

from .models.engagement_models import BusinessAnalytics, EngagementEvent, OverallAnalytics, Period

logger = logging.getLogger(__name__)


class EngagementApiClient:
    """
    Client for the engagement analytics service.

    track() is fire-and-forget and never raises; the analytics getters raise
    httpx errors so dashboards can show their own error state.
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the client

        Args:
            api_base: Service base URL
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests)
        """
        self.api_base = (api_base or os.getenv("ENGAGEMENT_API_URL", "http://localhost:8000")).rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.api_base,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"}
        )

    async def track(self, event: Union[EngagementEvent, Dict[str, Any]]) -> bool:
        """
        Send one engagement event.

        Returns:
            True if the service acknowledged the event, False otherwise
        """
        if isinstance(event, EngagementEvent):
            payload = event.model_dump(mode="json", by_alias=True, exclude_none=True)
        else:
            payload = event

        try:
            response = await self.client.post("/api/track-engagement", json=payload)
            if response.status_code == 200:
                return bool(response.json().get("success", False))
            logger.error(f"Engagement tracking failed: {response.status_code}")
            return False
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Engagement tracking error: {e}")
            return False

    async def get_business_analytics(
        self,
        business_id: str,
        period: Union[Period, str] = Period.WEEK,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> BusinessAnalytics:
        """Fetch windowed analytics for one business"""
        response = await self.client.get(
            f"/api/analytics/{business_id}",
            params=_window_params(period, start_date, end_date)
        )
        response.raise_for_status()
        return BusinessAnalytics.model_validate(response.json())

    async def get_overall_analytics(
        self,
        period: Union[Period, str] = Period.WEEK,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> OverallAnalytics:
        """Fetch windowed analytics across all businesses"""
        response = await self.client.get(
            "/api/analytics",
            params=_window_params(period, start_date, end_date)
        )
        response.raise_for_status()
        return OverallAnalytics.model_validate(response.json())

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()


def _window_params(
    period: Union[Period, str],
    start_date: Optional[datetime],
    end_date: Optional[datetime]
) -> Dict[str, str]:
    params = {"period": Period(period).value}
    if start_date is not None:
        params["startDate"] = start_date.isoformat()
    if end_date is not None:
        params["endDate"] = end_date.isoformat()
    return params
