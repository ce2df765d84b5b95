"""
Notification sink - the side channel swap transitions report through.

The swap coordinator only depends on the NotificationSink protocol, so
production code writes rows through DatabaseNotificationSink while tests can
hand in anything with a matching ``notify`` method.
"""

import logging
from typing import NamedTuple, Optional, Protocol

from sqlalchemy.orm import Session

from ...models import Notification, NotificationType, RelatedModel

logger = logging.getLogger(__name__)


class RelatedRecord(NamedTuple):
    """Tagged reference to the record a notification is about"""

    kind: RelatedModel
    id: int

    @classmethod
    def swap_request(cls, swap_request_id: int) -> "RelatedRecord":
        return cls(RelatedModel.SWAP_REQUEST, swap_request_id)

    @classmethod
    def from_columns(cls, related_model: Optional[str], related_id: Optional[int]) -> Optional["RelatedRecord"]:
        if related_id is None:
            return None
        return cls(RelatedModel(related_model or RelatedModel.SWAP_REQUEST.value), related_id)


class NotificationPayload(NamedTuple):
    user_id: int
    type: NotificationType
    title: str
    message: str
    related: Optional[RelatedRecord] = None
    action_required: bool = False


class NotificationSink(Protocol):
    """Protocol for notification delivery backends."""

    def notify(self, payload: NotificationPayload) -> None:
        """
        Record a notification for payload.user_id.

        Implementations may raise; callers treat delivery as best-effort and
        never let a failure here undo the state change that triggered it.
        """
        ...


class DatabaseNotificationSink:
    """Stores notifications in the notifications table for in-app display"""

    def __init__(self, db: Session):
        self.db = db

    def notify(self, payload: NotificationPayload) -> None:
        notification = Notification(
            user_id=payload.user_id,
            type=payload.type.value,
            title=payload.title,
            message=payload.message,
            related_id=payload.related.id if payload.related else None,
            related_model=payload.related.kind.value if payload.related else None,
            action_required=payload.action_required,
            read=False,
        )
        try:
            self.db.add(notification)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"🔔 {payload.type.value} notification stored for user {payload.user_id}")
