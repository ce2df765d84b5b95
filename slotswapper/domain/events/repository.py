"""Event repository - Database operations for calendar slots"""

from typing import Any, Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Event, EventStatus


class EventRepository:
    """Repository for event database operations"""

    @staticmethod
    def get_events(db: Session, owner_id: int) -> list[Event]:
        """Get all events for a user"""
        return (
            db.query(Event)
            .filter(Event.owner_id == owner_id)
            .order_by(Event.start_time.asc(), Event.id.asc())
            .all()
        )

    @staticmethod
    def get_event_by_id(db: Session, event_id: int, owner_id: int) -> Optional[Event]:
        """Get a specific event owned by owner_id"""
        return db.query(Event).filter(Event.id == event_id, Event.owner_id == owner_id).first()

    @staticmethod
    def get_event(db: Session, event_id: int) -> Optional[Event]:
        """Get an event regardless of owner"""
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def get_swappable_events(db: Session, excluding_user_id: int) -> list[Event]:
        """SWAPPABLE events owned by anyone other than excluding_user_id"""
        return (
            db.query(Event)
            .options(joinedload(Event.owner))
            .filter(
                Event.status == EventStatus.SWAPPABLE.value,
                Event.owner_id != excluding_user_id,
            )
            .order_by(Event.start_time.asc(), Event.id.asc())
            .all()
        )

    @staticmethod
    def create_event(db: Session, owner_id: int, **event_data) -> Event:
        event = Event(owner_id=owner_id, **event_data)
        db.add(event)
        db.flush()
        return event

    @staticmethod
    def update_unlocked_event(db: Session, event_id: int, owner_id: int, values: dict[str, Any]) -> int:
        """
        Update an event unless a pending swap holds it.

        Returns the number of rows changed (0 when the event is SWAP_PENDING).
        """
        return (
            db.query(Event)
            .filter(
                Event.id == event_id,
                Event.owner_id == owner_id,
                Event.status != EventStatus.SWAP_PENDING.value,
            )
            .update(values, synchronize_session=False)
        )

    @staticmethod
    def delete_unlocked_event(db: Session, event_id: int, owner_id: int) -> int:
        """Delete an event unless a pending swap holds it. Returns rows deleted"""
        return (
            db.query(Event)
            .filter(
                Event.id == event_id,
                Event.owner_id == owner_id,
                Event.status != EventStatus.SWAP_PENDING.value,
            )
            .delete(synchronize_session=False)
        )
