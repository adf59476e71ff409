"""Claim schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from adjusterhub.schemas.common import APIModel, Pagination
from adjusterhub.schemas.enums import ClaimStatus, ClaimType, Priority


class ClaimBase(APIModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    type: ClaimType
    priority: Priority = Priority.MEDIUM
    estimated_value: Optional[float] = Field(default=None, ge=0)
    adjuster_fee: Optional[float] = Field(default=None, ge=0)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    incident_date: Optional[datetime] = None
    deadline: Optional[datetime] = None


class ClaimCreate(ClaimBase):
    firm_id: Optional[int] = None  # required for ADMIN, implied for FIRM_ADMIN


class ClaimUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    status: Optional[ClaimStatus] = None
    priority: Optional[Priority] = None
    estimated_value: Optional[float] = Field(default=None, ge=0)
    final_value: Optional[float] = Field(default=None, ge=0)
    adjuster_fee: Optional[float] = Field(default=None, ge=0)
    deadline: Optional[datetime] = None

    @model_validator(mode="after")
    def required_fields_not_null(self) -> "ClaimUpdate":
        for name in ("title", "status", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ClaimAssign(APIModel):
    adjuster_id: Optional[int] = None


class FirmRef(APIModel):
    id: int
    name: str


class AdjusterRef(APIModel):
    id: int
    first_name: str
    last_name: str
    email: str


class Claim(ClaimBase):
    id: int
    claim_number: str
    status: ClaimStatus
    final_value: Optional[float] = None
    reported_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    firm_id: int
    adjuster_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ClaimDetail(Claim):
    firm: Optional[FirmRef] = None
    adjuster: Optional[AdjusterRef] = None


class ClaimList(APIModel):
    claims: List[Claim]
    pagination: Pagination
