"""Earning endpoints: the adjuster's ledger of fees, bonuses and expenses."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from adjusterhub.dependencies import get_current_user, get_earning_service
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.common import Pagination
from adjusterhub.schemas.earning import Earning, EarningCreate, EarningList, EarningStatusUpdate
from adjusterhub.schemas.enums import EarningStatus, EarningType
from adjusterhub.services.earning_service import EarningService

logger = get_logger(__name__)
router = APIRouter()


@router.get("", response_model=EarningList)
def list_earnings(
    status: Optional[EarningStatus] = None,
    type: Optional[EarningType] = None,
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    claim_id: Optional[int] = Query(default=None, alias="claimId"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    service: EarningService = Depends(get_earning_service),
) -> EarningList:
    """Page of the caller's earnings.

    ``summary`` covers every earning matching the filters, not just the page:
    totals, status/type breakdowns and a 12-month ``YYYY-MM`` breakdown.
    """
    items, total, summary = service.list_earnings(
        user,
        status=status.value if status else None,
        type=type.value if type else None,
        start_date=start_date,
        end_date=end_date,
        claim_id=claim_id,
        page=page,
        limit=limit,
    )
    return EarningList(
        earnings=[Earning.model_validate(e) for e in items],
        pagination=Pagination.build(page, limit, total),
        summary=summary,
    )


@router.post("", response_model=Earning, status_code=201)
def create_earning(
    payload: EarningCreate,
    user: UserModel = Depends(get_current_user),
    service: EarningService = Depends(get_earning_service),
) -> Earning:
    earning = service.create_earning(user, payload)
    logger.info("earning_created", earning_id=earning.id, amount=earning.amount)
    return Earning.model_validate(earning)


@router.patch("/{earning_id}", response_model=Earning)
def update_earning_status(
    earning_id: int,
    payload: EarningStatusUpdate,
    user: UserModel = Depends(get_current_user),
    service: EarningService = Depends(get_earning_service),
) -> Earning:
    earning = service.update_status(user, earning_id, payload.status)
    logger.info("earning_status_changed", earning_id=earning.id, status=earning.status)
    return Earning.model_validate(earning)
