"""Analytics router - reporting endpoints for venues and directors"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_user_type
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import success_response
from .service import AnalyticsService, single_metric

router = APIRouter(tags=["Analytics"])

venue_only = require_user_type("venue", message="Access denied. Venue access required")
director_only = require_user_type("director", message="Access denied. Director access required")


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """Dependency injection for AnalyticsService"""
    return AnalyticsService(db)


def analytics_response(analytics: dict, metric: Optional[str]) -> dict:
    if metric:
        return success_response(single_metric(analytics, metric), f"{metric} analytics retrieved successfully")
    return success_response(analytics, "Analytics data retrieved successfully")


@router.get("/api/venue/analytics")
async def venue_analytics(
    period: str = Query("month"),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    metric: Optional[str] = Query(None),
    current_user: UserProfile = Depends(venue_only),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return analytics_response(service.venue_analytics(current_user, period, start_date, end_date), metric)


@router.get("/api/director/analytics")
async def director_analytics(
    period: str = Query("month"),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    metric: Optional[str] = Query(None),
    current_user: UserProfile = Depends(director_only),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return analytics_response(service.director_analytics(current_user, period, start_date, end_date), metric)


__all__ = ["router"]
