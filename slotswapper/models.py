import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


class EventStatus(str, enum.Enum):
    BUSY = "BUSY"
    SWAPPABLE = "SWAPPABLE"
    SWAP_PENDING = "SWAP_PENDING"


class SwapStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class SwapAction(str, enum.Enum):
    """Audit tag stored on an Event after the coordinator touches it"""

    SWAP_ACCEPTED = "SWAP_ACCEPTED"
    SWAP_REJECTED = "SWAP_REJECTED"
    SWAP_CANCELLED = "SWAP_CANCELLED"


class NotificationType(str, enum.Enum):
    SWAP_REQUEST = "SWAP_REQUEST"
    SWAP_ACCEPTED = "SWAP_ACCEPTED"
    SWAP_REJECTED = "SWAP_REJECTED"
    SWAP_CANCELLED = "SWAP_CANCELLED"
    SWAP_COMPLETED = "SWAP_COMPLETED"


class RelatedModel(str, enum.Enum):
    SWAP_REQUEST = "SwapRequest"
    EVENT = "Event"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    events = relationship("Event", back_populates="owner", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), default=EventStatus.BUSY.value, nullable=False, index=True)  # BUSY, SWAPPABLE, SWAP_PENDING
    last_action = Column(String(50), nullable=True)  # SWAP_ACCEPTED, SWAP_REJECTED, SWAP_CANCELLED
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    owner = relationship("User", back_populates="events")


class SwapRequest(Base):
    __tablename__ = "swap_requests"
    __table_args__ = (
        Index("ix_swap_requests_slots_status", "requester_slot_id", "requested_slot_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Slots may be deleted by their owners once a request is terminal; history keeps the row
    requester_slot_id = Column(Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True)
    requested_slot_id = Column(Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True)
    requester_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    requested_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), default=SwapStatus.PENDING.value, nullable=False, index=True)
    request_message = Column(Text, nullable=True)
    response_message = Column(Text, nullable=True)
    # {"requester": {"start": iso, "end": iso}, "requested": {...}} captured on accept
    original_times = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    responded_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    requester_slot = relationship("Event", foreign_keys=[requester_slot_id])
    requested_slot = relationship("Event", foreign_keys=[requested_slot_id])
    requester = relationship("User", foreign_keys=[requester_user_id])
    requested_user = relationship("User", foreign_keys=[requested_user_id])


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_user_read_created", "user_id", "read", "created_at"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String(30), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    related_id = Column(Integer, nullable=True)
    related_model = Column(String(20), default=RelatedModel.SWAP_REQUEST.value, nullable=True)
    action_required = Column(Boolean, default=False, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="notifications")
