"""Calendar event schemas."""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from adjusterhub.schemas.common import APIModel
from adjusterhub.schemas.enums import CalendarEventStatus, CalendarEventType


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Offset-aware inputs are converted to the naive UTC the database stores."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CalendarEventCreate(APIModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    type: CalendarEventType = CalendarEventType.MEETING
    start_time: datetime
    end_time: datetime
    is_all_day: bool = False
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    claim_id: Optional[int] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value)


class CalendarEventUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    type: Optional[CalendarEventType] = None
    status: Optional[CalendarEventStatus] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    is_all_day: Optional[bool] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value)

    @model_validator(mode="after")
    def required_fields_not_null(self) -> "CalendarEventUpdate":
        for name in ("title", "type", "status", "start_time", "end_time", "is_all_day"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class EventClaim(APIModel):
    id: int
    claim_number: str
    title: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class CalendarEvent(APIModel):
    id: int
    user_id: int
    claim_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    type: CalendarEventType
    status: CalendarEventStatus
    start_time: datetime
    end_time: datetime
    is_all_day: bool
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    claim: Optional[EventClaim] = None


class CalendarEventList(APIModel):
    events: List[CalendarEvent]
