"""Dashboard summary and analytics for the signed-in user."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from adjusterhub.dependencies import get_current_user, get_dashboard_service
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.enums import AnalyticsPeriod
from adjusterhub.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats")
def dashboard_stats(
    user: UserModel = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    """Claim, earning and inbox counters, cached per user for a minute."""
    return service.stats(user)


@router.get("/analytics")
def dashboard_analytics(
    period: AnalyticsPeriod = AnalyticsPeriod.MONTH,
    months: int = Query(default=12, ge=1, le=24),
    user: UserModel = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    """Earnings and claim charts over the last ``months`` months.

    ``period`` picks the window for ``periodEarnings`` and
    ``completedThisPeriod``: the current calendar month, quarter or year.
    Only PAID earnings count as earned.
    """
    return service.analytics(user, period=period.value, months=months)
