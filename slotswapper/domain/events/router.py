"""Event router - FastAPI endpoints for a user's calendar slots"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import EventCreate, EventResponse, EventUpdate
from .service import EventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Dependency injection for EventService"""
    return EventService(db)


@router.get("")
async def get_events(
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    """Get all events for the current user"""
    events = service.get_events(current_user)
    return {
        "message": "Events retrieved successfully",
        "count": len(events),
        "events": [EventResponse.from_model(e) for e in events],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    """Create a new event (status defaults to BUSY)"""
    event = service.create_event(data, current_user)
    return {"message": "Event created successfully", "event": EventResponse.from_model(event)}


@router.get("/{event_id}")
async def get_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    event = service.get_event(event_id, current_user)
    return {"message": "Event retrieved successfully", "event": EventResponse.from_model(event)}


@router.put("/{event_id}")
async def update_event(
    event_id: int,
    data: EventUpdate,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    """Update an event (mark as swappable, reschedule, rename)"""
    event = service.update_event(event_id, data, current_user)
    return {"message": "Event updated successfully", "event": EventResponse.from_model(event)}


@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    """Delete an event"""
    return service.delete_event(event_id, current_user)
