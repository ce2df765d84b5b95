"""Notification domain schemas - Pydantic models for responses"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...models import Notification
from .sink import RelatedRecord


class RelatedRecordResponse(BaseModel):
    kind: str
    id: int


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    related: Optional[RelatedRecordResponse] = None
    actionRequired: bool
    read: bool
    createdAt: datetime

    @classmethod
    def from_model(cls, notification: Notification) -> "NotificationResponse":
        related = RelatedRecord.from_columns(notification.related_model, notification.related_id)
        return cls(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            related=RelatedRecordResponse(kind=related.kind.value, id=related.id) if related else None,
            actionRequired=notification.action_required,
            read=notification.read,
            createdAt=notification.created_at,
        )
