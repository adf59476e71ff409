"""Firm and connection schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from adjusterhub.schemas.common import APIModel, Pagination
from adjusterhub.schemas.enums import ConnectionStatus


class FirmCreate(APIModel):
    name: str = Field(min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=5000)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)


class Firm(APIModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    is_active: bool
    created_at: datetime
    available_claims: int = 0


class FirmList(APIModel):
    firms: List[Firm]
    pagination: Pagination


class ConnectionRequest(APIModel):
    notes: Optional[str] = Field(default=None, max_length=1000)


class ConnectionDecision(APIModel):
    status: ConnectionStatus


class FirmConnection(APIModel):
    id: int
    user_id: int
    firm_id: int
    status: ConnectionStatus
    notes: Optional[str] = None
    created_at: datetime


class FirmConnectionList(APIModel):
    connections: List[FirmConnection]
    pagination: Pagination
