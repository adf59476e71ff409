"""Calendar events: inspections, meetings and deadlines on the user's own schedule."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from adjusterhub.domain import claims as rules
from adjusterhub.errors import AppError
from adjusterhub.models.calendar import CalendarEventModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.calendar_repo import CalendarEventRepository
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.schemas.calendar import CalendarEventCreate, CalendarEventUpdate
from adjusterhub.schemas.enums import CalendarEventStatus, NotificationType
from adjusterhub.security.sanitize import sanitize_input, sanitize_text
from adjusterhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("address", "city", "state", "zip_code")


def conflict_summary(events: List[CalendarEventModel]) -> List[Dict[str, Any]]:
    return [
        {
            "id": e.id,
            "title": e.title,
            "startTime": e.start_time.isoformat(),
            "endTime": e.end_time.isoformat(),
        }
        for e in events
    ]


class CalendarService:
    def __init__(
        self,
        db: Session,
        event_repo: CalendarEventRepository,
        claim_repo: ClaimRepository,
        notification_service: NotificationService,
    ):
        self.db = db
        self.events = event_repo
        self.claims = claim_repo
        self.notifications = notification_service

    def list_events(
        self,
        user: UserModel,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        type: Optional[str] = None,
    ) -> List[CalendarEventModel]:
        return self.events.search(user.id, start=start, end=end, type=type)

    def get_event(self, user: UserModel, event_id: int) -> CalendarEventModel:
        event = self.events.get_for_user(event_id, user.id)
        if event is None:
            raise AppError.not_found("Event")
        return event

    def create_event(self, user: UserModel, payload: CalendarEventCreate) -> CalendarEventModel:
        self._check_window(user, payload.start_time, payload.end_time)
        if payload.claim_id is not None:
            claim = self.claims.get(payload.claim_id)
            if claim is None or not rules.can_view(user, claim):
                raise AppError.not_found("Claim")

        data = payload.model_dump()
        data["title"] = sanitize_text(data["title"])
        data["description"] = sanitize_input(data.get("description")) or None
        for field in TEXT_FIELDS:
            data[field] = sanitize_text(data.get(field)) or None
        data["type"] = payload.type.value

        event = self.events.create(
            CalendarEventModel(**data, user_id=user.id, status=CalendarEventStatus.SCHEDULED.value)
        )
        self.notifications.notify(
            user.id,
            NotificationType.CALENDAR_EVENT,
            "New Event Scheduled",
            f'Event "{event.title}" scheduled for {event.start_time:%Y-%m-%d}',
            {"eventId": event.id},
        )
        self.db.commit()
        logger.info("Calendar event %d created for user %d", event.id, user.id)
        return event

    def update_event(self, user: UserModel, event_id: int, update: CalendarEventUpdate) -> CalendarEventModel:
        event = self.get_event(user, event_id)
        changes = update.model_dump(exclude_unset=True)

        if "start_time" in changes or "end_time" in changes:
            self._check_window(
                user,
                changes.get("start_time", event.start_time),
                changes.get("end_time", event.end_time),
                exclude_id=event.id,
            )

        for name, value in changes.items():
            if name == "title":
                value = sanitize_text(value)
            elif name == "description":
                value = sanitize_input(value) or None
            elif name in TEXT_FIELDS:
                value = sanitize_text(value) or None
            elif name in ("type", "status"):
                value = value.value
            setattr(event, name, value)

        self.events.update(event)
        self.db.commit()
        return event

    def delete_event(self, user: UserModel, event_id: int) -> None:
        event = self.get_event(user, event_id)
        self.events.delete(event.id)
        self.db.commit()
        logger.info("Calendar event %d deleted by user %d", event_id, user.id)

    def _check_window(
        self, user: UserModel, start: datetime, end: datetime, exclude_id: Optional[int] = None
    ) -> None:
        if end <= start:
            raise AppError.validation("End time must be after start time")
        conflicts = self.events.overlapping(user.id, start, end, exclude_id=exclude_id)
        if conflicts:
            raise AppError.conflict("Time conflict detected", context={"conflicts": conflict_summary(conflicts)})
