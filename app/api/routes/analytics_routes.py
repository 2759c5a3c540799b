"""
Analytics Routes

POST /analytics/track - Count a page view (public, called by the page tracker)
GET /analytics/stats - Total, today's and per-page view counts (admin)
POST /analytics/daily - Increment daily counters (admin)
PUT /analytics/daily/{day}/top - Replace top companies / graduation years (admin)
PUT /analytics/daily/{day}/performance - Set performance stats (admin)
GET /analytics/daily - Daily documents in a date range (admin)
"""

from datetime import date, datetime, timedelta
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_admin
from app.services.analytics_service import AnalyticsService
from app.schemas.schemas import (
    AnalyticsDayResponse, DailyMetricsUpdate, MessageResponse, PageViewTrack, PerformanceUpdate,
    TopListsUpdate, ViewSummaryResponse
)

router = APIRouter(prefix="/analytics", tags=["Analytics"])

DEFAULT_RANGE_DAYS = 30


@router.post("/track", response_model=MessageResponse)
async def track_page_view(data: Optional[PageViewTrack] = None):
    """Count one page view for today. Known pages are also counted per page."""
    AnalyticsService().track_page_view(data.page if data else None)
    return MessageResponse(message="Page view tracked")


@router.get("/stats", response_model=ViewSummaryResponse)
async def view_stats(admin: dict = Depends(get_current_admin)):
    return AnalyticsService().view_summary()


@router.post("/daily", response_model=AnalyticsDayResponse)
async def update_daily_metrics(data: DailyMetricsUpdate, admin: dict = Depends(get_current_admin)):
    """Add the given amounts to a day's counters (today if no day is given)."""
    day = data.day or datetime.utcnow()
    return AnalyticsService().update_daily_metrics(day, data.metrics)


@router.put("/daily/{day}/top", response_model=AnalyticsDayResponse)
async def set_top_lists(day: date, data: TopListsUpdate, admin: dict = Depends(get_current_admin)):
    """Store pre-aggregated top-N snapshots for a day."""
    return AnalyticsService().set_top_lists(
        day,
        top_companies=[c.model_dump() for c in data.top_companies] if data.top_companies is not None else None,
        top_graduation_years=(
            [y.model_dump() for y in data.top_graduation_years]
            if data.top_graduation_years is not None else None
        ),
    )


@router.put("/daily/{day}/performance", response_model=AnalyticsDayResponse)
async def record_performance(day: date, data: PerformanceUpdate, admin: dict = Depends(get_current_admin)):
    return AnalyticsService().record_performance(day, **data.model_dump())


@router.get("/daily", response_model=List[AnalyticsDayResponse])
async def get_daily_metrics(
    start: Optional[date] = Query(None, description="First day (default: 30 days before end)"),
    end: Optional[date] = Query(None, description="Last day, inclusive (default: today)"),
    admin: dict = Depends(get_current_admin)
):
    """Daily rollups oldest first. Days with no activity have no document."""
    end = end or datetime.utcnow().date()
    start = start or end - timedelta(days=DEFAULT_RANGE_DAYS - 1)
    return AnalyticsService().get_range(start, end)
