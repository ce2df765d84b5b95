"""
Swap service - the swap request state machine.

A SwapRequest starts PENDING and moves exactly once to ACCEPTED, REJECTED or
CANCELLED. Its two slots follow along: SWAPPABLE -> SWAP_PENDING when the
request is created, then BUSY (accepted, times exchanged) or back to
SWAPPABLE (rejected / cancelled).

Every transition is a single transaction made of conditional writes:
slots only leave SWAPPABLE if they are still SWAPPABLE, and a request only
leaves PENDING if it is still PENDING. A caller that loses a race therefore
sees a zero row count, the whole transaction rolls back and a domain error
is raised instead of overwriting the winner's work.

Notifications are sent after commit through the injected NotificationSink
and never affect the outcome of the transition.
"""

import logging
import math
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...config import HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT
from ...database import atomic
from ...exceptions import (
    AlreadyProcessedError,
    DuplicateRequestError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    SelfSwapNotAllowedError,
    ValidationError,
)
from ...models import (
    Event,
    EventStatus,
    NotificationType,
    SwapAction,
    SwapRequest,
    SwapStatus,
    User,
)
from ..events.repository import EventRepository
from ..notifications.sink import NotificationPayload, NotificationSink, RelatedRecord
from .repository import SwapRepository
from .schemas import SwapRequestCreate, SwapResponseCreate

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_MESSAGE = "No reason provided"


def _time_range(event: Event) -> dict:
    return {"start": event.start_time.isoformat(), "end": event.end_time.isoformat()}


class SwapService:
    """Service layer coordinating events, swap requests and notifications"""

    def __init__(self, db: Session, notifier: NotificationSink):
        self.db = db
        self.notifier = notifier
        self.repo = SwapRepository()
        self.event_repo = EventRepository()

    # ========================================================================
    # STATE TRANSITIONS
    # ========================================================================

    def create_swap_request(self, data: SwapRequestCreate, user: User) -> SwapRequest:
        """Offer my slot in exchange for someone else's SWAPPABLE slot"""
        my_slot = self.event_repo.get_event_by_id(self.db, data.mySlotId, user.id)
        if not my_slot:
            raise NotFoundError("Your slot was not found", details={"slotId": data.mySlotId})

        their_slot = self.event_repo.get_event(self.db, data.theirSlotId)
        if not their_slot:
            raise NotFoundError("Requested slot was not found", details={"slotId": data.theirSlotId})

        if their_slot.status != EventStatus.SWAPPABLE:
            raise InvalidStateError(
                "Requested slot is not available for swap",
                details={"slotId": their_slot.id, "status": their_slot.status},
            )

        if my_slot.status != EventStatus.SWAPPABLE:
            raise InvalidStateError(
                "Your slot is not marked as swappable",
                details={"slotId": my_slot.id, "status": my_slot.status},
            )

        if their_slot.owner_id == user.id:
            raise SelfSwapNotAllowedError(details={"slotId": their_slot.id})

        pair = {"mySlotId": my_slot.id, "theirSlotId": their_slot.id}
        if self.repo.find_pending_between(self.db, my_slot.id, their_slot.id):
            raise DuplicateRequestError(details=pair)

        now = datetime.utcnow()
        with atomic(self.db):
            reserved = self.repo.reserve_slots(self.db, [my_slot.id, their_slot.id], now)
            if reserved != 2:
                # Someone else locked one of the slots after our checks
                if self.repo.find_pending_between(self.db, my_slot.id, their_slot.id):
                    raise DuplicateRequestError(details=pair)
                raise InvalidStateError("Slots are no longer available for swap", details=pair)

            swap_request = self.repo.add_swap_request(
                self.db,
                requester_slot_id=my_slot.id,
                requested_slot_id=their_slot.id,
                requester_user_id=user.id,
                requested_user_id=their_slot.owner_id,
                request_message=data.message,
                status=SwapStatus.PENDING.value,
                created_at=now,
                updated_at=now,
            )

        logger.info(
            f"🔄 Swap request {swap_request.id} created: slot {my_slot.id} (user {user.id}) "
            f"<-> slot {their_slot.id} (user {swap_request.requested_user_id})"
        )

        self._notify(
            NotificationPayload(
                user_id=swap_request.requested_user_id,
                type=NotificationType.SWAP_REQUEST,
                title="New Swap Request!",
                message=f"{user.name} wants to swap time slots with you.",
                related=RelatedRecord.swap_request(swap_request.id),
                action_required=True,
            )
        )
        return self._reload(swap_request.id)

    def respond_to_swap_request(self, request_id: int, data: SwapResponseCreate, user: User) -> SwapRequest:
        """Accept (exchange times) or reject an incoming request"""
        swap_request = self._get_swap_request(request_id)

        if swap_request.requested_user_id != user.id:
            raise ForbiddenError(
                "Not authorized to respond to this request", details={"requestId": request_id}
            )

        if swap_request.status != SwapStatus.PENDING:
            raise AlreadyProcessedError(details={"requestId": request_id, "status": swap_request.status})

        if data.accept:
            self._accept(swap_request, data.responseMessage)
        else:
            self._reject(swap_request, data.responseMessage)

        return self._reload(request_id)

    def _accept(self, swap_request: SwapRequest, response_message: Optional[str]) -> None:
        requester_slot = swap_request.requester_slot
        requested_slot = swap_request.requested_slot
        original_times = {
            "requester": _time_range(requester_slot),
            "requested": _time_range(requested_slot),
        }
        # Read before the transaction; the SWAP_PENDING lock keeps owners from editing them meanwhile
        requester_times = (requester_slot.start_time, requester_slot.end_time)
        requested_times = (requested_slot.start_time, requested_slot.end_time)
        requester_name = swap_request.requester.name
        responder_id = swap_request.requested_user_id
        responder_name = swap_request.requested_user.name

        now = datetime.utcnow()
        with atomic(self.db):
            self._resolve(
                swap_request.id,
                {
                    SwapRequest.status: SwapStatus.ACCEPTED.value,
                    SwapRequest.responded_at: now,
                    SwapRequest.completed_at: now,
                    SwapRequest.response_message: response_message,
                    SwapRequest.original_times: original_times,
                    SwapRequest.updated_at: now,
                },
            )
            # Times move, owners stay
            moved = self.repo.reschedule_slot(
                self.db, requester_slot.id, *requested_times, SwapAction.SWAP_ACCEPTED.value, now
            )
            moved += self.repo.reschedule_slot(
                self.db, requested_slot.id, *requester_times, SwapAction.SWAP_ACCEPTED.value, now
            )
            if moved != 2:
                raise InvalidStateError(
                    "Swap slots are no longer held by this request",
                    details={"requestId": swap_request.id},
                )

        logger.info(
            f"✅ Swap request {swap_request.id} accepted: slots {requester_slot.id} and "
            f"{requested_slot.id} rescheduled"
        )

        related = RelatedRecord.swap_request(swap_request.id)
        self._notify(
            NotificationPayload(
                user_id=swap_request.requester_user_id,
                type=NotificationType.SWAP_ACCEPTED,
                title="Swap Request Accepted!",
                message=f"{responder_name} accepted your swap request. Your events have been rescheduled.",
                related=related,
                action_required=False,
            )
        )
        self._notify(
            NotificationPayload(
                user_id=responder_id,
                type=NotificationType.SWAP_COMPLETED,
                title="Swap Completed!",
                message=f"You accepted {requester_name}'s swap request.",
                related=related,
                action_required=False,
            )
        )

    def _reject(self, swap_request: SwapRequest, response_message: Optional[str]) -> None:
        slot_ids = [swap_request.requester_slot_id, swap_request.requested_slot_id]
        responder_name = swap_request.requested_user.name

        now = datetime.utcnow()
        with atomic(self.db):
            self._resolve(
                swap_request.id,
                {
                    SwapRequest.status: SwapStatus.REJECTED.value,
                    SwapRequest.responded_at: now,
                    SwapRequest.completed_at: now,
                    SwapRequest.response_message: response_message or DEFAULT_REJECTION_MESSAGE,
                    SwapRequest.updated_at: now,
                },
            )
            self._release(swap_request.id, slot_ids, SwapAction.SWAP_REJECTED, now)

        logger.info(f"❎ Swap request {swap_request.id} rejected, slots {slot_ids} are swappable again")

        self._notify(
            NotificationPayload(
                user_id=swap_request.requester_user_id,
                type=NotificationType.SWAP_REJECTED,
                title="Swap Request Declined",
                message=f"{responder_name} declined your swap request.",
                related=RelatedRecord.swap_request(swap_request.id),
                action_required=False,
            )
        )

    def cancel_swap_request(self, request_id: int, user: User) -> SwapRequest:
        """Withdraw a pending request. Only the requester may cancel"""
        swap_request = self._get_swap_request(request_id)

        if swap_request.requester_user_id != user.id:
            raise ForbiddenError("Not authorized to cancel this request", details={"requestId": request_id})

        if swap_request.status != SwapStatus.PENDING:
            raise AlreadyProcessedError(
                "Cannot cancel a processed request",
                details={"requestId": request_id, "status": swap_request.status},
            )

        slot_ids = [swap_request.requester_slot_id, swap_request.requested_slot_id]
        requested_user_id = swap_request.requested_user_id

        now = datetime.utcnow()
        with atomic(self.db):
            self._resolve(
                request_id,
                {
                    SwapRequest.status: SwapStatus.CANCELLED.value,
                    SwapRequest.cancelled_at: now,
                    SwapRequest.updated_at: now,
                },
            )
            self._release(request_id, slot_ids, SwapAction.SWAP_CANCELLED, now)

        logger.info(f"🚫 Swap request {request_id} cancelled by user {user.id}")

        self._notify(
            NotificationPayload(
                user_id=requested_user_id,
                type=NotificationType.SWAP_CANCELLED,
                title="Swap Request Cancelled",
                message=f"{user.name} cancelled their swap request.",
                related=RelatedRecord.swap_request(request_id),
                action_required=False,
            )
        )
        return self._reload(request_id)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get_swappable_slots(self, user: User) -> list[Event]:
        """SWAPPABLE slots offered by other users"""
        return self.event_repo.get_swappable_events(self.db, user.id)

    def get_swap_request(self, request_id: int, user: User) -> SwapRequest:
        """A single request, visible to either party"""
        swap_request = self._get_swap_request(request_id)
        if user.id not in (swap_request.requester_user_id, swap_request.requested_user_id):
            raise ForbiddenError("Not authorized to view this request", details={"requestId": request_id})
        return swap_request

    def get_swap_history(
        self,
        user: User,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = HISTORY_DEFAULT_LIMIT,
    ) -> dict:
        """Paginated requests involving the user, newest first, with status totals"""
        if status and status.lower() != "all":
            status = status.upper()
            if status not in SwapStatus.__members__:
                raise ValidationError(
                    f"Unknown status filter: {status}",
                    details={"allowed": ["all"] + [s.value for s in SwapStatus]},
                )
        else:
            status = None

        if page < 1:
            raise ValidationError("page must be 1 or greater")
        if limit < 1 or limit > HISTORY_MAX_LIMIT:
            raise ValidationError(f"limit must be between 1 and {HISTORY_MAX_LIMIT}")

        swap_requests, total = self.repo.get_history(self.db, user.id, status, (page - 1) * limit, limit)
        counts = self.repo.count_by_status(self.db, user.id)

        return {
            "swap_requests": swap_requests,
            "pagination": {
                "current": page,
                "limit": limit,
                "pages": math.ceil(total / limit),
                "total": total,
            },
            "summary": {
                "pending": counts[SwapStatus.PENDING.value],
                "accepted": counts[SwapStatus.ACCEPTED.value],
                "rejected": counts[SwapStatus.REJECTED.value],
                "cancelled": counts[SwapStatus.CANCELLED.value],
            },
        }

    def get_my_requests(self, user: User) -> dict:
        """Split requests into those sent to the user and those the user sent"""
        return {
            "incoming": self.repo.get_incoming(self.db, user.id),
            "outgoing": self.repo.get_outgoing(self.db, user.id),
        }

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _get_swap_request(self, request_id: int) -> SwapRequest:
        swap_request = self.repo.get_swap_request(self.db, request_id)
        if not swap_request:
            raise NotFoundError("Swap request not found", details={"requestId": request_id})
        return swap_request

    def _reload(self, request_id: int) -> SwapRequest:
        # Conditional writes bypass the identity map
        self.db.expire_all()
        return self._get_swap_request(request_id)

    def _resolve(self, request_id: int, values: dict) -> None:
        if not self.repo.resolve_swap_request(self.db, request_id, values):
            raise AlreadyProcessedError(details={"requestId": request_id})

    def _release(self, request_id: int, slot_ids: list[int], action: SwapAction, now: datetime) -> None:
        released = self.repo.release_slots(self.db, slot_ids, action.value, now)
        if released != len(slot_ids):
            raise InvalidStateError(
                "Swap slots are no longer held by this request", details={"requestId": request_id}
            )

    def _notify(self, payload: NotificationPayload) -> None:
        """Best-effort delivery; the transition has already been committed"""
        try:
            self.notifier.notify(payload)
        except Exception as e:
            logger.error(
                f"❌ Failed to send {payload.type.value} notification to user {payload.user_id}: {e}"
            )
