"""Booking, time slot, and status data models."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class BookingStatus(str, Enum):
    """All states in a booking lifecycle."""
    PENDING = "pending"
    APPROVED = "approved"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    KEY_REQUESTED = "key_requested"
    KEY_ISSUED = "key_issued"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    OVERDUE = "overdue"


TERMINAL_STATUSES = frozenset({
    BookingStatus.REJECTED,
    BookingStatus.CANCELLED,
    BookingStatus.COMPLETED,
    BookingStatus.OVERDUE,
})

# Bookings in these states keep their window closed to other requests.
SLOT_HOLDING_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.APPROVED,
    BookingStatus.CONFIRMED,
    BookingStatus.KEY_REQUESTED,
    BookingStatus.KEY_ISSUED,
})

ACCESS_CODE_STATUSES = frozenset({BookingStatus.APPROVED, BookingStatus.CONFIRMED})


def _ordered(model):
    if model.start_time >= model.end_time:
        raise ValueError(
            f"start_time {model.start_time.isoformat()} must be before end_time "
            f"{model.end_time.isoformat()}"
        )
    return model


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    CLASS = "class"
    MAINTENANCE = "maintenance"


class TimeSlot(BaseModel):
    """A candidate booking window. Derived per query, never persisted."""
    room_id: str
    date: date
    start_time: datetime
    end_time: datetime
    status: SlotStatus = SlotStatus.AVAILABLE

    @model_validator(mode="after")
    def _check_order(self) -> "TimeSlot":
        return _ordered(self)


class TimeWindow(BaseModel):
    """A fixed block on a room's calendar (a class or a maintenance period)."""
    room_id: str
    start_time: datetime
    end_time: datetime
    label: str = ""

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        return _ordered(self)


class StatusChange(BaseModel):
    """Recorded history entry for a status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    action: str
    actor_role: str
    actor_id: Optional[int] = None
    at: datetime


class Booking(BaseModel):
    """A persisted booking covering one or more participants."""
    id: str
    room_id: str
    start_time: datetime
    end_time: datetime
    purpose: str = ""
    creator_id: int
    participant_ids: list[int]
    status: BookingStatus = BookingStatus.PENDING
    secret_code: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    key_issued_at: Optional[datetime] = None
    key_returned_at: Optional[datetime] = None
    history: list[StatusChange] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_booking(self) -> "Booking":
        if not self.participant_ids:
            raise ValueError("a booking needs at least one participant")
        return _ordered(self)

    @property
    def is_bulk(self) -> bool:
        return len(self.participant_ids) > 1

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def holds_slot(self) -> bool:
        return self.status in SLOT_HOLDING_STATUSES

    def involves(self, user_id: int) -> bool:
        return user_id == self.creator_id or user_id in self.participant_ids


class BookingRequest(BaseModel):
    """Validated booking request data.

    An empty ``participant_ids`` is kept as-is so the validator can reject it
    with a domain error rather than a schema error.
    """
    room_id: str
    start_time: datetime
    end_time: datetime
    purpose: str = ""
    participant_ids: list[int] = Field(default_factory=list)
    requester_id: int
    requester_role: str = "student"
