"""Earning schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from adjusterhub.schemas.common import APIModel, Pagination
from adjusterhub.schemas.enums import EarningStatus, EarningType


class EarningCreate(APIModel):
    amount: float = Field(gt=0)
    type: EarningType
    description: Optional[str] = Field(default=None, max_length=1000)
    claim_id: Optional[int] = None


class EarningStatusUpdate(APIModel):
    status: EarningStatus


class Earning(APIModel):
    id: int
    user_id: int
    claim_id: Optional[int] = None
    amount: float
    type: EarningType
    status: EarningStatus
    description: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime


class EarningList(APIModel):
    earnings: List[Earning]
    pagination: Pagination
    summary: Dict[str, Any]
