"""Swap domain schemas - typed commands and responses for the swap ledger"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, StrictBool

from ...models import SwapRequest
from ...schemas import UserResponse
from ..events.schemas import SlotResponse

MAX_MESSAGE_LENGTH = 1000


class SwapRequestCreate(BaseModel):
    """Command for requesting a swap of my slot for someone else's"""

    mySlotId: int = Field(..., gt=0)
    theirSlotId: int = Field(..., gt=0)
    message: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)


class SwapResponseCreate(BaseModel):
    """Command for accepting or rejecting an incoming swap request"""

    # "accept": "no" must not coerce into a decision
    accept: StrictBool
    responseMessage: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)


class TimeRange(BaseModel):
    start: datetime
    end: datetime


class OriginalTimes(BaseModel):
    requester: TimeRange
    requested: TimeRange


class SwapRequestResponse(BaseModel):
    id: int
    requesterSlotId: Optional[int]
    requestedSlotId: Optional[int]
    requesterUserId: int
    requestedUserId: int
    status: str
    requestMessage: Optional[str] = None
    responseMessage: Optional[str] = None
    originalTimes: Optional[OriginalTimes] = None
    createdAt: datetime
    updatedAt: Optional[datetime] = None
    respondedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    cancelledAt: Optional[datetime] = None
    requesterSlot: Optional[SlotResponse] = None
    requestedSlot: Optional[SlotResponse] = None
    requester: Optional[UserResponse] = None
    requestedUser: Optional[UserResponse] = None

    @classmethod
    def from_model(cls, swap_request: SwapRequest) -> "SwapRequestResponse":
        return cls(
            id=swap_request.id,
            requesterSlotId=swap_request.requester_slot_id,
            requestedSlotId=swap_request.requested_slot_id,
            requesterUserId=swap_request.requester_user_id,
            requestedUserId=swap_request.requested_user_id,
            status=swap_request.status,
            requestMessage=swap_request.request_message,
            responseMessage=swap_request.response_message,
            originalTimes=swap_request.original_times,
            createdAt=swap_request.created_at,
            updatedAt=swap_request.updated_at,
            respondedAt=swap_request.responded_at,
            completedAt=swap_request.completed_at,
            cancelledAt=swap_request.cancelled_at,
            requesterSlot=(
                SlotResponse.from_model(swap_request.requester_slot) if swap_request.requester_slot else None
            ),
            requestedSlot=(
                SlotResponse.from_model(swap_request.requested_slot) if swap_request.requested_slot else None
            ),
            requester=UserResponse.model_validate(swap_request.requester) if swap_request.requester else None,
            requestedUser=(
                UserResponse.model_validate(swap_request.requested_user) if swap_request.requested_user else None
            ),
        )


class Timeline(BaseModel):
    requested: datetime
    responded: Optional[datetime] = None
    completed: Optional[datetime] = None
    cancelled: Optional[datetime] = None

    @classmethod
    def from_model(cls, swap_request: SwapRequest) -> "Timeline":
        return cls(
            requested=swap_request.created_at,
            responded=swap_request.responded_at,
            completed=swap_request.completed_at,
            cancelled=swap_request.cancelled_at,
        )


class HistorySummary(BaseModel):
    pending: int
    accepted: int
    rejected: int
    cancelled: int


class Pagination(BaseModel):
    current: int
    limit: int
    pages: int
    total: int
