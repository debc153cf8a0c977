"""
Engagement Analytics Service - FastAPI Application

Ingress for listing-page tracking calls and egress for the owner and admin
analytics dashboards. Tracking is fire-and-forget: the endpoint answers
success whether the event was stored, dropped as invalid, or lost.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from ..config import get_config
from ..errors import InvalidWindowError
from ..models.engagement_models import (
    BusinessAnalytics,
    OverallAnalytics,
    Period,
    TrackResponse,
    utc_now,
)
from .resilience import ResilientAnalyticsService, build_service

logger = logging.getLogger(__name__)


# Global state (tests install their own service before startup)
class ServiceState:
    def __init__(self):
        self.service: Optional[ResilientAnalyticsService] = None


state = ServiceState()


async def _connect_durable(service: ResilientAnalyticsService):
    """Open the Postgres pool; on failure keep serving from memory"""
    durable = service.durable
    if durable is None:
        return
    try:
        await durable.connect()
        await durable.ensure_schema()
    except Exception as e:
        logger.warning(f"Durable store unavailable at startup, using in-memory fallback: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    owns_service = state.service is None
    if owns_service:
        config = get_config()
        logging.basicConfig(
            level=getattr(logging, config.log_level.upper(), logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        state.service = build_service(config)
        await _connect_durable(state.service)
    logger.info("Engagement service initialized")

    yield

    if owns_service and state.service is not None:
        await state.service.close()
        state.service = None
    logger.info("Engagement service shutdown")


app = FastAPI(
    title="Engagement Analytics Service",
    description="Tracks listing engagement and serves windowed business analytics",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tracking calls come from every category/city subdomain
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Prometheus metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("cf-connecting-ip") or request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "services": state.service.status() if state.service else None
    }


@app.post("/api/track-engagement", response_model=TrackResponse)
async def track_engagement(request: Request) -> TrackResponse:
    """
    Record one engagement event.

    Always answers success so tracking can never break the page that
    triggered it; failures are logged and counted instead.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        logger.warning(f"Unreadable engagement payload: {e}")
        return TrackResponse(message="Engagement tracked")

    result = await state.service.track(
        payload,
        user_agent=request.headers.get("user-agent"),
        ip_address=_client_ip(request)
    )
    if result.accepted:
        return TrackResponse(message="Engagement tracked successfully")
    return TrackResponse(message="Engagement tracked")


@app.get("/api/analytics/{business_id}", response_model=BusinessAnalytics)
async def get_business_analytics(
    business_id: str,
    period: Period = Period.WEEK,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate")
) -> BusinessAnalytics:
    """Windowed analytics for one business (owner dashboard)"""
    try:
        return await state.service.get_analytics(business_id, period, start_date, end_date)
    except InvalidWindowError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.get("/api/analytics", response_model=OverallAnalytics)
async def get_overall_analytics(
    period: Period = Period.WEEK,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate")
) -> OverallAnalytics:
    """Windowed analytics across all businesses (admin dashboard)"""
    try:
        return await state.service.get_overview(period, start_date, end_date)
    except InvalidWindowError as e:
        raise HTTPException(status_code=422, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
