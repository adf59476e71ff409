"""Unit tests for CalendarService: time windows, overlap detection and ownership."""

from datetime import datetime, timedelta, timezone

import pytest

import adjusterhub.dependencies as deps
from adjusterhub.errors import AppError
from adjusterhub.models.notification import NotificationModel
from adjusterhub.schemas.calendar import CalendarEventCreate, CalendarEventUpdate
from adjusterhub.schemas.enums import CalendarEventStatus, ClaimStatus, NotificationType

NINE = datetime(2026, 11, 2, 9, 0)


@pytest.fixture()
def service(container, db):
    return deps.get_calendar_service(db=db, notifications=deps.get_notification_service(db))


def _event(start=NINE, hours=1, **fields) -> CalendarEventCreate:
    data = {"title": "Roof inspection", "startTime": start, "endTime": start + timedelta(hours=hours)}
    data.update(fields)
    return CalendarEventCreate(**data)


class TestCreateEvent:
    def test_defaults_and_notification(self, service, make_user, db):
        user = make_user()
        event = service.create_event(user, _event(description="<b>Bring</b> the ladder"))

        assert event.type == "MEETING"
        assert event.status == CalendarEventStatus.SCHEDULED.value
        assert event.description == "<b>Bring</b> the ladder"
        notification = db.query(NotificationModel).filter_by(user_id=user.id).one()
        assert notification.type == NotificationType.CALENDAR_EVENT.value
        assert notification.title == "New Event Scheduled"
        assert "2026-11-02" in notification.message

    def test_end_must_follow_start(self, service, make_user):
        with pytest.raises(AppError) as exc_info:
            service.create_event(make_user(), _event(hours=0))
        assert exc_info.value.status_code == 400
        assert exc_info.value.user_message == "End time must be after start time"

    def test_overlap_is_conflict(self, service, make_user):
        user = make_user()
        first = service.create_event(user, _event())
        with pytest.raises(AppError) as exc_info:
            service.create_event(user, _event(start=NINE + timedelta(minutes=30)))
        assert exc_info.value.status_code == 409
        assert [c["id"] for c in exc_info.value.context["conflicts"]] == [first.id]

    def test_enclosing_event_is_conflict(self, service, make_user):
        user = make_user()
        service.create_event(user, _event(start=NINE + timedelta(minutes=15), hours=0.5))
        with pytest.raises(AppError):
            service.create_event(user, _event(hours=2))

    def test_back_to_back_events_allowed(self, service, make_user):
        user = make_user()
        service.create_event(user, _event())
        second = service.create_event(user, _event(start=NINE + timedelta(hours=1)))
        assert second.start_time == NINE + timedelta(hours=1)

    def test_other_users_and_cancelled_events_do_not_conflict(self, service, make_user):
        user, other = make_user(), make_user()
        service.create_event(other, _event())
        cancelled = service.create_event(user, _event())
        service.update_event(user, cancelled.id, CalendarEventUpdate(status=CalendarEventStatus.CANCELLED))
        assert service.create_event(user, _event()).id != cancelled.id

    def test_offset_times_stored_as_utc(self, service, make_user):
        start = datetime(2026, 11, 2, 9, 0, tzinfo=timezone(timedelta(hours=-6)))
        event = service.create_event(make_user(), _event(start=start))
        assert event.start_time == datetime(2026, 11, 2, 15, 0)
        assert event.start_time.tzinfo is None

    def test_claim_must_be_visible(self, service, make_user, make_firm, make_claim):
        user = make_user()
        taken = make_claim(make_firm(), status=ClaimStatus.ASSIGNED, adjuster=make_user())
        with pytest.raises(AppError) as exc_info:
            service.create_event(user, _event(claimId=taken.id))
        assert exc_info.value.status_code == 404

    def test_linked_claim(self, service, make_user, make_firm, make_claim):
        user = make_user()
        claim = make_claim(make_firm(), status=ClaimStatus.ASSIGNED, adjuster=user)
        event = service.create_event(user, _event(claimId=claim.id, type="INSPECTION"))
        assert event.claim.claim_number == claim.claim_number


class TestUpdateEvent:
    def test_moving_event_ignores_itself(self, service, make_user):
        user = make_user()
        event = service.create_event(user, _event())
        moved = service.update_event(user, event.id, CalendarEventUpdate(endTime=NINE + timedelta(hours=2)))
        assert moved.end_time == NINE + timedelta(hours=2)

    def test_moving_onto_another_event_conflicts(self, service, make_user):
        user = make_user()
        service.create_event(user, _event())
        later = service.create_event(user, _event(start=NINE + timedelta(hours=3)))
        with pytest.raises(AppError) as exc_info:
            service.update_event(user, later.id, CalendarEventUpdate(startTime=NINE + timedelta(minutes=30)))
        assert exc_info.value.status_code == 409

    def test_new_start_checked_against_stored_end(self, service, make_user):
        user = make_user()
        event = service.create_event(user, _event())
        with pytest.raises(AppError) as exc_info:
            service.update_event(user, event.id, CalendarEventUpdate(startTime=NINE + timedelta(hours=1)))
        assert exc_info.value.user_message == "End time must be after start time"

    def test_foreign_event_not_found(self, service, make_user):
        event = service.create_event(make_user(), _event())
        with pytest.raises(AppError) as exc_info:
            service.update_event(make_user(), event.id, CalendarEventUpdate(title="Mine now"))
        assert exc_info.value.user_message == "Event not found"


class TestListAndDelete:
    def test_range_and_type_filters(self, service, make_user):
        user = make_user()
        service.create_event(user, _event(start=NINE + timedelta(days=2), title="Later"))
        service.create_event(user, _event(title="Sooner", type="INSPECTION"))
        service.create_event(user, _event(start=NINE + timedelta(days=30), title="Next month"))

        events = service.list_events(user, start=NINE, end=NINE + timedelta(days=7))
        assert [e.title for e in events] == ["Sooner", "Later"]
        assert [e.title for e in service.list_events(user, type="INSPECTION")] == ["Sooner"]

    def test_delete(self, service, make_user):
        user = make_user()
        event = service.create_event(user, _event())
        service.delete_event(user, event.id)
        assert service.list_events(user) == []
        with pytest.raises(AppError):
            service.delete_event(user, event.id)
