"""Shared test fixtures and helpers."""

from datetime import date, datetime, time, timezone
from typing import Optional

import pytest

from room_booking.booking.state_machine import BookingStateMachine
from room_booking.booking.store import InMemoryBookingStore
from room_booking.booking.validator import BookingValidator
from room_booking.clock import FixedClock
from room_booking.config import AppConfig, KeyConfig, PolicyConfig, SchedulingConfig
from room_booking.schemas.booking_schema import Booking, BookingRequest, BookingStatus
from room_booking.service import ReservationService
from room_booking.tools.calendar import CalendarFeed
from room_booking.tools.rooms import RoomDirectory

DAY = date(2026, 3, 3)
NOW = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    """A UTC instant on ``day`` (the booking day by default)."""
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def make_booking(
    booking_id: str = "BK-TEST0001",
    room_id: str = "A101",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    status: BookingStatus = BookingStatus.PENDING,
    creator_id: int = 7,
    participant_ids: Optional[list[int]] = None,
    secret_code: Optional[str] = None,
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    return Booking(
        id=booking_id,
        room_id=room_id,
        start_time=start or at(10),
        end_time=end or at(11),
        purpose="Study group",
        creator_id=creator_id,
        participant_ids=participant_ids or [creator_id],
        status=status,
        secret_code=secret_code,
        created_at=NOW,
        updated_at=NOW,
    )


def make_request(
    requester_id: int = 7,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    room_id: str = "A101",
    participant_ids: Optional[list[int]] = None,
    requester_role: str = "student",
) -> BookingRequest:
    """Helper to create a BookingRequest; participants default to the requester."""
    return BookingRequest(
        room_id=room_id,
        start_time=start or at(10),
        end_time=end or at(11),
        purpose="Study group",
        participant_ids=[requester_id] if participant_ids is None else participant_ids,
        requester_id=requester_id,
        requester_role=requester_role,
    )


@pytest.fixture
def config():
    return AppConfig(
        scheduling=SchedulingConfig(open_hour=8, close_hour=21, slot_minutes=30, timezone="UTC"),
        policy=PolicyConfig(
            min_booking_minutes=30, max_booking_minutes=180, max_advance_days=14, buffer_minutes=0,
        ),
        keys=KeyConfig(overdue_grace_minutes=15),
        log_level="INFO",
        service_name="room-booking-test",
    )


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def rooms():
    return RoomDirectory()


@pytest.fixture
def calendar():
    return CalendarFeed()


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def machine():
    return BookingStateMachine()


@pytest.fixture
def validator(rooms, store, calendar, clock, config):
    return BookingValidator(rooms, store, calendar, clock, config)


@pytest.fixture
def service(rooms, calendar, store, clock, config):
    return ReservationService(
        rooms=rooms, calendar=calendar, store=store, clock=clock, config=config
    )


def lifecycle_to(service: ReservationService, clock: FixedClock, target: BookingStatus) -> Booking:
    """Submit a 10:00-11:00 A101 booking and drive it to ``target``."""
    booking = service.submit_booking(make_request())
    if target == BookingStatus.PENDING:
        return booking
    booking = service.transition_status(booking.id, "approve", "admin", actor_id=1)
    if target == BookingStatus.APPROVED:
        return booking
    booking = service.transition_status(booking.id, "request_key", "student", actor_id=7)
    if target == BookingStatus.KEY_REQUESTED:
        return booking
    clock.set(at(9, 55))
    booking = service.transition_status(
        booking.id, "issue_key", "guard", access_code=booking.secret_code
    )
    if target == BookingStatus.KEY_ISSUED:
        return booking
    clock.set(at(11))
    booking = service.transition_status(booking.id, "complete", "guard")
    assert booking.status == target
    return booking


