"""Event domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

from ...models import Event
from ...schemas import UserResponse
from ...shared.validators import to_naive_utc, validate_required_text, validate_time_range

# SWAP_PENDING is only ever set by the swap coordinator
OwnerEventStatus = Literal["BUSY", "SWAPPABLE"]


class EventCreate(BaseModel):
    """Schema for creating a new event"""

    title: str
    startTime: datetime
    endTime: datetime
    status: OwnerEventStatus = "BUSY"

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return validate_required_text(v)

    @field_validator("startTime", "endTime")
    @classmethod
    def normalize_times(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def validate_times(self):
        validate_time_range(self.startTime, self.endTime)
        return self


class EventUpdate(BaseModel):
    """Schema for updating an existing event"""

    title: Optional[str] = None
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None
    status: Optional[OwnerEventStatus] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return validate_required_text(v)

    @field_validator("startTime", "endTime")
    @classmethod
    def normalize_times(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def validate_times(self):
        validate_time_range(self.startTime, self.endTime)
        return self


class EventResponse(BaseModel):
    """Schema for event response"""

    id: int
    ownerId: int
    title: str
    startTime: datetime
    endTime: datetime
    status: str
    lastAction: Optional[str] = None
    lastUpdated: Optional[datetime] = None
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, event: Event) -> "EventResponse":
        return cls(
            id=event.id,
            ownerId=event.owner_id,
            title=event.title,
            startTime=event.start_time,
            endTime=event.end_time,
            status=event.status,
            lastAction=event.last_action,
            lastUpdated=event.last_updated,
            createdAt=event.created_at,
        )


class SlotResponse(EventResponse):
    """Event with its owner, as shown in the marketplace and swap listings"""

    owner: Optional[UserResponse] = None

    @classmethod
    def from_model(cls, event: Event) -> "SlotResponse":
        base = EventResponse.from_model(event)
        return cls(
            **base.model_dump(),
            owner=UserResponse.model_validate(event.owner) if event.owner else None,
        )
