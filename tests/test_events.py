# =============================================================================
# tests/test_events.py - Event Service Tests
# =============================================================================
# An owner edits their own slots freely until a swap request locks them.
# =============================================================================

from datetime import datetime

import pytest
from pydantic import ValidationError as SchemaValidationError

from slotswapper.domain.events.schemas import EventCreate, EventUpdate
from slotswapper.domain.events.service import EventService
from slotswapper.exceptions import InvalidStateError, NotFoundError, ValidationError
from slotswapper.models import Event, EventStatus


@pytest.fixture
def event_service(db):
    return EventService(db)


class TestEventSchemas:
    def test_defaults_to_busy(self):
        data = EventCreate(title="  Dentist ", startTime="2026-05-01T09:00:00", endTime="2026-05-01T10:00:00")

        assert data.status == "BUSY"
        assert data.title == "Dentist"

    def test_end_must_follow_start(self):
        with pytest.raises(SchemaValidationError, match="endTime must be after startTime"):
            EventCreate(title="Backwards", startTime="2026-05-01T10:00:00", endTime="2026-05-01T09:00:00")

    def test_owner_cannot_set_swap_pending(self):
        with pytest.raises(SchemaValidationError):
            EventUpdate(status="SWAP_PENDING")

    def test_blank_title_rejected(self):
        with pytest.raises(SchemaValidationError, match="Title cannot be blank"):
            EventUpdate(title="   ")

    def test_offset_times_are_stored_as_utc(self):
        data = EventCreate(title="Call", startTime="2026-03-02T10:00:00+02:00", endTime="2026-03-02T11:00:00Z")

        assert data.startTime == datetime(2026, 3, 2, 8, 0)
        assert data.endTime == datetime(2026, 3, 2, 11, 0)
        assert data.startTime.tzinfo is None


class TestEventService:
    """Tests for event CRUD and the swap lock"""

    def test_create_and_list_in_start_order(self, event_service, alice, bob):
        later = event_service.create_event(
            EventCreate(title="Later", startTime=datetime(2026, 5, 2, 9), endTime=datetime(2026, 5, 2, 10)), alice
        )
        earlier = event_service.create_event(
            EventCreate(
                title="Earlier",
                startTime=datetime(2026, 5, 1, 9),
                endTime=datetime(2026, 5, 1, 10),
                status="SWAPPABLE",
            ),
            alice,
        )

        assert later.owner_id == alice.id
        assert later.status == EventStatus.BUSY
        assert earlier.status == EventStatus.SWAPPABLE
        assert [e.id for e in event_service.get_events(alice)] == [earlier.id, later.id]
        assert event_service.get_events(bob) == []

    def test_other_users_event_is_not_found(self, event_service, bob, morning_slot):
        with pytest.raises(NotFoundError):
            event_service.get_event(morning_slot.id, bob)

    def test_mark_swappable_and_rename(self, event_service, make_event, alice):
        event = make_event(alice, datetime(2026, 5, 1, 9), datetime(2026, 5, 1, 10), status=EventStatus.BUSY)

        updated = event_service.update_event(event.id, EventUpdate(status="SWAPPABLE", title="Gym"), alice)

        assert updated.status == EventStatus.SWAPPABLE
        assert updated.title == "Gym"
        assert updated.last_updated is not None

    def test_partial_time_update_checked_against_stored_value(self, event_service, alice, morning_slot):
        # Stored slot ends at 11:00
        with pytest.raises(ValidationError):
            event_service.update_event(morning_slot.id, EventUpdate(startTime=datetime(2026, 3, 2, 12)), alice)

        updated = event_service.update_event(morning_slot.id, EventUpdate(endTime=datetime(2026, 3, 2, 12)), alice)
        assert updated.end_time == datetime(2026, 3, 2, 12)

    def test_partial_update_with_offset_time(self, event_service, alice, morning_slot):
        # Stored 10:00-11:00 naive UTC; 13:30+02:00 is 11:30 UTC
        updated = event_service.update_event(
            morning_slot.id, EventUpdate(endTime="2026-03-02T13:30:00+02:00"), alice
        )
        assert updated.end_time == datetime(2026, 3, 2, 11, 30)

        with pytest.raises(ValidationError):
            event_service.update_event(morning_slot.id, EventUpdate(endTime="2026-03-02T11:00:00+02:00"), alice)

    def test_locked_event_cannot_be_updated_or_deleted(
        self, db, event_service, swap_service, request_swap, alice, morning_slot, afternoon_slot
    ):
        request_swap(swap_service, alice, morning_slot, afternoon_slot)

        with pytest.raises(InvalidStateError):
            event_service.update_event(morning_slot.id, EventUpdate(status="BUSY"), alice)
        with pytest.raises(InvalidStateError):
            event_service.delete_event(morning_slot.id, alice)

        db.expire_all()
        assert db.get(Event, morning_slot.id).status == EventStatus.SWAP_PENDING

    def test_delete(self, db, event_service, alice, morning_slot):
        event_id = morning_slot.id

        result = event_service.delete_event(event_id, alice)

        assert result == {"message": "Event deleted successfully"}
        assert db.query(Event).filter(Event.id == event_id).count() == 0
