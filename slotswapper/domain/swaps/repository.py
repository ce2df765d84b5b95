"""Swap repository - Database operations for the swap ledger"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Query, Session, joinedload

from ...models import Event, EventStatus, SwapRequest, SwapStatus


def _with_parties(query: Query) -> Query:
    return query.options(
        joinedload(SwapRequest.requester_slot),
        joinedload(SwapRequest.requested_slot),
        joinedload(SwapRequest.requester),
        joinedload(SwapRequest.requested_user),
    )


class SwapRepository:
    """Repository for swap request and slot-locking operations"""

    @staticmethod
    def get_swap_request(db: Session, request_id: int) -> Optional[SwapRequest]:
        return _with_parties(db.query(SwapRequest)).filter(SwapRequest.id == request_id).first()

    @staticmethod
    def find_pending_between(db: Session, slot_a_id: int, slot_b_id: int) -> Optional[SwapRequest]:
        """PENDING request over the unordered pair {slot_a_id, slot_b_id}"""
        return (
            db.query(SwapRequest)
            .filter(
                SwapRequest.status == SwapStatus.PENDING.value,
                or_(
                    and_(
                        SwapRequest.requester_slot_id == slot_a_id,
                        SwapRequest.requested_slot_id == slot_b_id,
                    ),
                    and_(
                        SwapRequest.requester_slot_id == slot_b_id,
                        SwapRequest.requested_slot_id == slot_a_id,
                    ),
                ),
            )
            .first()
        )

    @staticmethod
    def add_swap_request(db: Session, **swap_data) -> SwapRequest:
        swap_request = SwapRequest(**swap_data)
        db.add(swap_request)
        db.flush()
        return swap_request

    # ------------------------------------------------------------------
    # Conditional writes. Each returns the number of rows that matched so
    # the caller can tell a lost race from a successful transition.
    # ------------------------------------------------------------------

    @staticmethod
    def reserve_slots(db: Session, slot_ids: list[int], now: datetime) -> int:
        """SWAPPABLE -> SWAP_PENDING for every id still SWAPPABLE"""
        return (
            db.query(Event)
            .filter(Event.id.in_(slot_ids), Event.status == EventStatus.SWAPPABLE.value)
            .update(
                {Event.status: EventStatus.SWAP_PENDING.value, Event.last_updated: now},
                synchronize_session=False,
            )
        )

    @staticmethod
    def release_slots(db: Session, slot_ids: list[int], action: str, now: datetime) -> int:
        """SWAP_PENDING -> SWAPPABLE, tagging each slot with the action that freed it"""
        return (
            db.query(Event)
            .filter(Event.id.in_(slot_ids), Event.status == EventStatus.SWAP_PENDING.value)
            .update(
                {
                    Event.status: EventStatus.SWAPPABLE.value,
                    Event.last_action: action,
                    Event.last_updated: now,
                },
                synchronize_session=False,
            )
        )

    @staticmethod
    def reschedule_slot(
        db: Session,
        slot_id: int,
        start_time: datetime,
        end_time: datetime,
        action: str,
        now: datetime,
    ) -> int:
        """SWAP_PENDING -> BUSY with new times"""
        return (
            db.query(Event)
            .filter(Event.id == slot_id, Event.status == EventStatus.SWAP_PENDING.value)
            .update(
                {
                    Event.start_time: start_time,
                    Event.end_time: end_time,
                    Event.status: EventStatus.BUSY.value,
                    Event.last_action: action,
                    Event.last_updated: now,
                },
                synchronize_session=False,
            )
        )

    @staticmethod
    def resolve_swap_request(db: Session, request_id: int, values: dict[str, Any]) -> int:
        """Move a request out of PENDING. Returns 0 if it already left PENDING"""
        return (
            db.query(SwapRequest)
            .filter(SwapRequest.id == request_id, SwapRequest.status == SwapStatus.PENDING.value)
            .update(values, synchronize_session=False)
        )

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    @staticmethod
    def _involving(db: Session, user_id: int) -> Query:
        return db.query(SwapRequest).filter(
            or_(
                SwapRequest.requester_user_id == user_id,
                SwapRequest.requested_user_id == user_id,
            )
        )

    @staticmethod
    def get_history(
        db: Session,
        user_id: int,
        status: Optional[str],
        offset: int,
        limit: int,
    ) -> tuple[list[SwapRequest], int]:
        """Page of requests involving user_id, newest first, plus the filtered total"""
        query = SwapRepository._involving(db, user_id)
        if status:
            query = query.filter(SwapRequest.status == status)

        total = query.count()
        swap_requests = (
            _with_parties(query)
            .order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return swap_requests, total

    @staticmethod
    def count_by_status(db: Session, user_id: int) -> dict[str, int]:
        """Status counts over every request involving user_id"""
        rows = (
            db.query(SwapRequest.status, func.count(SwapRequest.id))
            .filter(
                or_(
                    SwapRequest.requester_user_id == user_id,
                    SwapRequest.requested_user_id == user_id,
                )
            )
            .group_by(SwapRequest.status)
            .all()
        )
        counts = {status.value: 0 for status in SwapStatus}
        counts.update({status: count for status, count in rows})
        return counts

    @staticmethod
    def get_incoming(db: Session, user_id: int) -> list[SwapRequest]:
        return (
            _with_parties(db.query(SwapRequest))
            .filter(SwapRequest.requested_user_id == user_id)
            .order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc())
            .all()
        )

    @staticmethod
    def get_outgoing(db: Session, user_id: int) -> list[SwapRequest]:
        return (
            _with_parties(db.query(SwapRequest))
            .filter(SwapRequest.requester_user_id == user_id)
            .order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc())
            .all()
        )
