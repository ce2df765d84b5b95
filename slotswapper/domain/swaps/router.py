"""Swap router - FastAPI endpoints for the swap marketplace"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...config import HISTORY_DEFAULT_LIMIT
from ...database import get_db
from ...models import SwapStatus, User
from ..events.schemas import EventResponse, SlotResponse
from ..notifications.sink import DatabaseNotificationSink, NotificationSink
from .schemas import (
    HistorySummary,
    Pagination,
    SwapRequestCreate,
    SwapRequestResponse,
    SwapResponseCreate,
    Timeline,
)
from .service import SwapService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/swap", tags=["Swap"])


def get_notification_sink(db: Session = Depends(get_db)) -> NotificationSink:
    """Dependency injection for the notification side channel"""
    return DatabaseNotificationSink(db)


def get_swap_service(
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notification_sink),
) -> SwapService:
    """Dependency injection for SwapService"""
    return SwapService(db, notifier)


# ============================================================================
# MARKETPLACE
# ============================================================================


@router.get("/swappable-slots")
async def get_swappable_slots(
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Get swappable slots from other users"""
    slots = service.get_swappable_slots(current_user)
    return {
        "message": "Swappable slots retrieved successfully",
        "count": len(slots),
        "slots": [SlotResponse.from_model(s) for s in slots],
    }


# ============================================================================
# SWAP LIFECYCLE
# ============================================================================


@router.post("/swap-request", status_code=status.HTTP_201_CREATED)
async def create_swap_request(
    data: SwapRequestCreate,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Request to swap one of my swappable slots for someone else's"""
    swap_request = service.create_swap_request(data, current_user)
    return {
        "message": "Swap request sent successfully",
        "swapRequest": SwapRequestResponse.from_model(swap_request),
        "notification": "The other user has been notified of your request.",
    }


@router.post("/swap-response/{request_id}")
async def respond_to_swap_request(
    request_id: int,
    data: SwapResponseCreate,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Accept or reject an incoming swap request"""
    swap_request = service.respond_to_swap_request(request_id, data, current_user)
    body = {
        "swapRequest": SwapRequestResponse.from_model(swap_request),
        "timeline": Timeline.from_model(swap_request),
    }

    if swap_request.status == SwapStatus.ACCEPTED:
        body["message"] = "Swap accepted successfully! Events have been rescheduled."
        body["updatedEvents"] = {
            "requesterEvent": EventResponse.from_model(swap_request.requester_slot),
            "requestedEvent": EventResponse.from_model(swap_request.requested_slot),
        }
    else:
        body["message"] = "Swap request declined"
    return body


@router.delete("/swap-request/{request_id}")
async def cancel_swap_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Cancel a pending swap request I sent"""
    swap_request = service.cancel_swap_request(request_id, current_user)
    return {
        "message": "Swap request cancelled successfully",
        "swapRequest": SwapRequestResponse.from_model(swap_request),
        "timeline": Timeline.from_model(swap_request),
    }


@router.get("/swap-request/{request_id}")
async def get_swap_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    swap_request = service.get_swap_request(request_id, current_user)
    return {
        "message": "Swap request retrieved successfully",
        "swapRequest": SwapRequestResponse.from_model(swap_request),
        "timeline": Timeline.from_model(swap_request),
    }


# ============================================================================
# HISTORY
# ============================================================================


@router.get("/history")
async def get_swap_history(
    status: Optional[str] = Query(None, description="Filter by status, or 'all'"),
    page: int = Query(1),
    limit: int = Query(HISTORY_DEFAULT_LIMIT),
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Get swap request history with status tracking"""
    history = service.get_swap_history(current_user, status, page, limit)
    return {
        "message": "Swap history retrieved successfully",
        "swapRequests": [SwapRequestResponse.from_model(r) for r in history["swap_requests"]],
        "pagination": Pagination(**history["pagination"]),
        "summary": HistorySummary(**history["summary"]),
    }


@router.get("/my-requests")
async def get_my_requests(
    current_user: User = Depends(get_current_user),
    service: SwapService = Depends(get_swap_service),
):
    """Get the current user's incoming and outgoing swap requests"""
    requests = service.get_my_requests(current_user)
    return {
        "message": "Swap requests retrieved successfully",
        "incoming": [SwapRequestResponse.from_model(r) for r in requests["incoming"]],
        "outgoing": [SwapRequestResponse.from_model(r) for r in requests["outgoing"]],
    }
