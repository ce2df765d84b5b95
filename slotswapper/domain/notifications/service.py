"""Notification service - read-acknowledgement for in-app notifications"""

import logging

from sqlalchemy.orm import Session

from ...database import atomic
from ...exceptions import NotFoundError
from ...models import Notification, User
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Service layer for notification listing and read state"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def get_notifications(self, user: User, unread_only: bool = False) -> list[Notification]:
        return self.repo.get_notifications(self.db, user.id, unread_only)

    def get_unread_count(self, user: User) -> int:
        return self.repo.count_unread(self.db, user.id)

    def mark_read(self, notification_id: int, user: User) -> Notification:
        """Mark one of the caller's notifications as read"""
        notification = self.repo.get_notification_by_id(self.db, notification_id, user.id)
        if not notification:
            raise NotFoundError("Notification not found", details={"notificationId": notification_id})

        if not notification.read:
            with atomic(self.db):
                notification.read = True
            self.db.refresh(notification)
        return notification

    def mark_all_read(self, user: User) -> int:
        with atomic(self.db):
            updated = self.repo.mark_all_read(self.db, user.id)

        logger.info(f"✅ User {user.id} marked {updated} notification(s) as read")
        return updated
