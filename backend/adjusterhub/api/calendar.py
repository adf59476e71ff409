"""Calendar endpoints: the signed-in user's inspections, meetings and deadlines."""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from adjusterhub.dependencies import get_calendar_service, get_current_user
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.calendar import (
    CalendarEvent,
    CalendarEventCreate,
    CalendarEventList,
    CalendarEventUpdate,
    as_naive_utc,
)
from adjusterhub.schemas.enums import CalendarEventType
from adjusterhub.services.calendar_service import CalendarService

logger = get_logger(__name__)
router = APIRouter()


@router.get("", response_model=CalendarEventList)
def list_events(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    type: Optional[CalendarEventType] = None,
    user: UserModel = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service),
) -> CalendarEventList:
    """Events starting within ``[start, end]``, earliest first."""
    events = service.list_events(
        user, start=as_naive_utc(start), end=as_naive_utc(end), type=type.value if type else None
    )
    return CalendarEventList(events=[CalendarEvent.model_validate(e) for e in events])


@router.post("", response_model=CalendarEvent, status_code=201)
def create_event(
    payload: CalendarEventCreate,
    user: UserModel = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service),
) -> CalendarEvent:
    """Schedule an event.

    400 when it ends before it starts; 409 with ``conflicts`` when it
    overlaps another non-cancelled event.
    """
    event = service.create_event(user, payload)
    logger.info("calendar_event_created", event_id=event.id, type=event.type)
    return CalendarEvent.model_validate(event)


@router.get("/{event_id}", response_model=CalendarEvent)
def get_event(
    event_id: int,
    user: UserModel = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service),
) -> CalendarEvent:
    return CalendarEvent.model_validate(service.get_event(user, event_id))


@router.put("/{event_id}", response_model=CalendarEvent)
def update_event(
    event_id: int,
    payload: CalendarEventUpdate,
    user: UserModel = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service),
) -> CalendarEvent:
    event = service.update_event(user, event_id, payload)
    logger.info("calendar_event_updated", event_id=event.id, changes=sorted(payload.model_dump(exclude_unset=True)))
    return CalendarEvent.model_validate(event)


@router.delete("/{event_id}")
def delete_event(
    event_id: int,
    user: UserModel = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service),
) -> Dict[str, Any]:
    service.delete_event(user, event_id)
    return {"success": True, "message": "Event deleted successfully"}
