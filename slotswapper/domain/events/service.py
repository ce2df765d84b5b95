"""Event service - Business logic for a user's own calendar slots"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ...database import atomic
from ...exceptions import InvalidStateError, NotFoundError, ValidationError
from ...models import Event, EventStatus, User
from ...shared.validators import validate_time_range
from .repository import EventRepository
from .schemas import EventCreate, EventUpdate

logger = logging.getLogger(__name__)


class EventService:
    """Service layer for event CRUD. Swap transitions live in SwapService"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EventRepository()

    def get_events(self, user: User) -> list[Event]:
        """Get all events for a user"""
        return self.repo.get_events(self.db, user.id)

    def get_event(self, event_id: int, user: User) -> Event:
        """Get a specific event"""
        event = self.repo.get_event_by_id(self.db, event_id, user.id)
        if not event:
            raise NotFoundError("Event not found", details={"eventId": event_id})
        return event

    def create_event(self, data: EventCreate, user: User) -> Event:
        """Create a new event"""
        with atomic(self.db):
            event = self.repo.create_event(
                self.db,
                user.id,
                title=data.title,
                start_time=data.startTime,
                end_time=data.endTime,
                status=data.status,
            )

        logger.info(f"📅 User {user.id} created event {event.id} ({event.status})")
        return event

    def update_event(self, event_id: int, data: EventUpdate, user: User) -> Event:
        """Update title, times or status of an event that no swap is holding"""
        event = self.get_event(event_id, user)
        if event.status == EventStatus.SWAP_PENDING:
            raise InvalidStateError(
                "Event is locked by a pending swap request", details={"eventId": event_id}
            )

        updates = {}
        if data.title is not None:
            updates[Event.title] = data.title
        if data.startTime is not None:
            updates[Event.start_time] = data.startTime
        if data.endTime is not None:
            updates[Event.end_time] = data.endTime
        if data.status is not None:
            updates[Event.status] = data.status

        try:
            validate_time_range(
                updates.get(Event.start_time, event.start_time),
                updates.get(Event.end_time, event.end_time),
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if not updates:
            return event

        updates[Event.last_updated] = datetime.utcnow()
        with atomic(self.db):
            updated = self.repo.update_unlocked_event(self.db, event_id, user.id, updates)
            if not updated:
                # A swap request reserved the slot between our read and the write
                raise InvalidStateError(
                    "Event is locked by a pending swap request", details={"eventId": event_id}
                )

        self.db.refresh(event)
        logger.info(f"✏️ User {user.id} updated event {event_id}")
        return event

    def delete_event(self, event_id: int, user: User) -> dict:
        """Delete an event that no swap is holding"""
        event = self.get_event(event_id, user)
        if event.status == EventStatus.SWAP_PENDING:
            raise InvalidStateError(
                "Cannot delete an event with a pending swap request", details={"eventId": event_id}
            )

        with atomic(self.db):
            deleted = self.repo.delete_unlocked_event(self.db, event_id, user.id)
            if not deleted:
                raise InvalidStateError(
                    "Cannot delete an event with a pending swap request", details={"eventId": event_id}
                )

        logger.info(f"🗑️ User {user.id} deleted event {event_id}")
        return {"message": "Event deleted successfully"}
