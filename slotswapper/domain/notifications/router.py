"""Notification router - FastAPI endpoints for in-app notifications"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import NotificationResponse
from .service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Dependency injection for NotificationService"""
    return NotificationService(db)


@router.get("")
async def get_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """Get the current user's notifications, newest first"""
    notifications = service.get_notifications(current_user, unread_only)
    return {
        "message": "Notifications retrieved successfully",
        "count": len(notifications),
        "notifications": [NotificationResponse.from_model(n) for n in notifications],
    }


@router.get("/unread-count")
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """Get the number of unread notifications"""
    return {
        "message": "Unread count retrieved successfully",
        "unreadCount": service.get_unread_count(current_user),
    }


@router.post("/read-all")
async def mark_all_notifications_read(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """Mark every notification as read"""
    updated = service.mark_all_read(current_user)
    return {"message": "Notifications marked as read", "updated": updated}


@router.post("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """Mark a single notification as read"""
    notification = service.mark_read(notification_id, current_user)
    return {
        "message": "Notification marked as read",
        "notification": NotificationResponse.from_model(notification),
    }
