"""User profile schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from adjusterhub.schemas.common import APIModel, Pagination
from adjusterhub.schemas.enums import Role


class UserSummary(APIModel):
    """The user object returned by login and registration."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: Role
    email_verified: bool


class UserProfile(UserSummary):
    firm_id: Optional[int] = None
    is_active: bool
    two_factor_enabled: bool
    phone: Optional[str] = None
    license_number: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)
    years_experience: Optional[int] = None
    hourly_rate: Optional[float] = None
    travel_radius: Optional[int] = None
    bio: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime


class ProfileUpdate(APIModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = None
    license_number: Optional[str] = None
    specialties: Optional[List[str]] = None
    years_experience: Optional[int] = Field(default=None, ge=0, le=80)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    travel_radius: Optional[int] = Field(default=None, ge=0, le=2000)
    bio: Optional[str] = Field(default=None, max_length=2000)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class AdminUserUpdate(APIModel):
    is_active: Optional[bool] = None
    role: Optional[Role] = None
    firm_id: Optional[int] = None


class UserList(APIModel):
    users: List[UserProfile]
    pagination: Pagination
