"""Unit tests for the engagement API client"""

import json
from datetime import datetime, timezone

import httpx
import pytest

from engagement_engine.client import EngagementApiClient
from engagement_engine.models.engagement_models import Period


def analytics_body(business_id="B1"):
    return {
        "businessId": business_id,
        "period": "week",
        "startDate": "2024-06-01T00:00:00Z",
        "endDate": "2024-06-08T00:00:00Z",
        "metrics": {"totalViews": 4, "phoneClicks": 1, "conversionRate": 25.0},
        "topSources": [{"source": "direct", "views": 4, "percentage": 100.0}],
        "topSearchQueries": [],
        "deviceBreakdown": {"mobile": 1, "tablet": 0, "desktop": 3},
        "hourlyDistribution": [{"hour": h, "views": 0, "interactions": 0} for h in range(24)],
    }


class TestEngagementApiClient:
    """Tests for EngagementApiClient"""

    @pytest.mark.asyncio
    async def test_track_posts_camel_case(self, make_event):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"success": True, "message": "Engagement tracked"})

        client = EngagementApiClient("http://engagement.test", transport=httpx.MockTransport(handler))
        ok = await client.track(make_event("phone_click", search_query="plumber"))
        await client.close()

        assert ok
        assert seen[0].url.path == "/api/track-engagement"
        body = json.loads(seen[0].content)
        assert body["businessId"] == "B1"
        assert body["eventType"] == "phone_click"
        assert body["eventData"] == {"searchQuery": "plumber"}

    @pytest.mark.asyncio
    async def test_track_never_raises(self, make_event):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        client = EngagementApiClient("http://engagement.test", transport=httpx.MockTransport(handler))
        ok = await client.track(make_event("view"))
        await client.close()

        assert ok is False

    @pytest.mark.asyncio
    async def test_track_server_error(self):
        client = EngagementApiClient(
            "http://engagement.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(503))
        )
        ok = await client.track({"businessId": "B1", "eventType": "view"})
        await client.close()

        assert ok is False

    @pytest.mark.asyncio
    async def test_get_business_analytics(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=analytics_body())

        client = EngagementApiClient("http://engagement.test/", transport=httpx.MockTransport(handler))
        result = await client.get_business_analytics(
            "B1",
            Period.MONTH,
            start_date=datetime(2024, 5, 1, tzinfo=timezone.utc)
        )
        await client.close()

        assert result.metrics.total_views == 4
        assert result.device_breakdown.desktop == 3
        assert seen[0].url.path == "/api/analytics/B1"
        assert seen[0].url.params["period"] == "month"
        assert seen[0].url.params["startDate"] == "2024-05-01T00:00:00+00:00"
        assert "endDate" not in seen[0].url.params

    @pytest.mark.asyncio
    async def test_get_overall_analytics(self):
        body = {
            "period": "day",
            "startDate": "2024-06-07T00:00:00Z",
            "endDate": "2024-06-08T00:00:00Z",
            "totalClickEvents": 3,
            "activeBusinesses": 2,
        }
        client = EngagementApiClient(
            "http://engagement.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        )
        result = await client.get_overall_analytics("day")
        await client.close()

        assert result.total_click_events == 3
        assert result.active_businesses == 2

    @pytest.mark.asyncio
    async def test_analytics_errors_raise(self):
        client = EngagementApiClient(
            "http://engagement.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(422, json={"detail": "bad"}))
        )

        with pytest.raises(httpx.HTTPStatusError):
            await client.get_business_analytics("B1")
        await client.close()

    def test_base_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("ENGAGEMENT_API_URL", "http://analytics.internal:9000/")

        client = EngagementApiClient()

        assert client.api_base == "http://analytics.internal:9000"
