"""
Booking validator: checks a request and persists it as one pending booking.

Rejection points, in order:
    1. window      -> InvalidWindowError
    2. participants -> EmptyParticipantsError (NotPermittedError for bulk by non-staff)
    3. room status -> RoomUnavailableError
    4. conflicts   -> ConflictError / RoomUnavailableError
Steps 3 and 4 and the insert run under the room's lock, against a fresh
read of the room, so two overlapping requests for the same room can never
both commit and a room deleted mid-request never gains a booking. A
rejected request writes nothing.

Existing bookings must be at least ``buffer_minutes`` away from the new
window; classes and maintenance only block a true overlap.
"""

import logging
from datetime import datetime, timedelta
from typing import Sequence

from room_booking.clock import Clock
from room_booking.config import AppConfig
from room_booking.errors import (
    ConflictError,
    EmptyParticipantsError,
    InvalidWindowError,
    NotPermittedError,
    RoomUnavailableError,
)
from room_booking.booking.state_machine import ActorRole
from room_booking.booking.store import BookingStore
from room_booking.scheduling.availability import resolve_status
from room_booking.scheduling.slots import day_start
from room_booking.schemas.booking_schema import (
    SLOT_HOLDING_STATUSES,
    Booking,
    BookingStatus,
    SlotStatus,
)
from room_booking.schemas.room_schema import Room, RoomStatus
from room_booking.tools.calendar import CalendarFeed
from room_booking.tools.rooms import RoomDirectory, operating_hours
from room_booking.utils import new_booking_id

logger = logging.getLogger(__name__)

BULK_BOOKING_ROLES = frozenset({ActorRole.STAFF.value, ActorRole.ADMIN.value})


class BookingValidator:
    """Validates booking requests against policy and live availability."""

    def __init__(
        self,
        rooms: RoomDirectory,
        store: BookingStore,
        calendar: CalendarFeed,
        clock: Clock,
        config: AppConfig,
    ) -> None:
        self.rooms = rooms
        self.store = store
        self.calendar = calendar
        self.clock = clock
        self.config = config

    def submit(
        self,
        room: Room,
        start_time: datetime,
        end_time: datetime,
        purpose: str,
        participant_ids: Sequence[int],
        requester_id: int,
        requester_role: str = ActorRole.STUDENT.value,
    ) -> Booking:
        """
        Validate and persist a booking request.

        Returns:
            The new booking, status ``pending``, covering every participant.

        Raises:
            InvalidWindowError, EmptyParticipantsError, NotPermittedError,
            RoomUnavailableError, ConflictError.
        """
        now = self.clock.now()
        self._check_window(room, start_time, end_time, now)
        participants = self._check_participants(participant_ids, requester_id, requester_role)

        with self.store.room_lock(room.id):
            room = self.rooms.get(room.id)
            if room.status != RoomStatus.AVAILABLE:
                raise RoomUnavailableError(f"Room {room.id} is {room.status.value}.")
            self._check_conflicts(room, start_time, end_time)
            booking = Booking(
                id=new_booking_id(),
                room_id=room.id,
                start_time=start_time,
                end_time=end_time,
                purpose=purpose,
                creator_id=requester_id,
                participant_ids=participants,
                status=BookingStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self.store.add(booking)

        logger.info(
            "Booking created: %s room %s %s-%s for %d participant(s)",
            booking.id, room.id, start_time.isoformat(), end_time.isoformat(),
            len(participants),
        )
        return booking

    def _check_window(self, room: Room, start: datetime, end: datetime, now: datetime) -> None:
        if start.tzinfo is None or end.tzinfo is None:
            raise InvalidWindowError("Booking times must include a timezone offset.")
        if start >= end:
            raise InvalidWindowError("Booking start time must be before its end time.")
        if start < now:
            raise InvalidWindowError("Booking start time is in the past.")

        tz = self.config.scheduling.tzinfo
        open_hour, close_hour = operating_hours(room, self.config.scheduling)
        midnight = day_start(start.astimezone(tz).date(), tz)
        opens = midnight + timedelta(hours=open_hour)
        closes = midnight + timedelta(hours=close_hour)
        if start < opens or end > closes:
            raise InvalidWindowError(
                f"Room {room.id} is open {open_hour:02d}:00-{close_hour:02d}:00; "
                "the requested window falls outside operating hours."
            )

        policy = self.config.policy
        minutes = (end - start) / timedelta(minutes=1)
        if minutes < policy.min_booking_minutes:
            raise InvalidWindowError(
                f"Bookings must last at least {policy.min_booking_minutes} minutes."
            )
        if minutes > policy.max_booking_minutes:
            raise InvalidWindowError(
                f"Bookings may last at most {policy.max_booking_minutes} minutes."
            )
        if start > now + timedelta(days=policy.max_advance_days):
            raise InvalidWindowError(
                f"Bookings may be made at most {policy.max_advance_days} days in advance."
            )

    def _check_participants(
        self, participant_ids: Sequence[int], requester_id: int, requester_role: str
    ) -> list[int]:
        if not participant_ids:
            raise EmptyParticipantsError("A booking needs at least one participant.")
        participants = list(dict.fromkeys(participant_ids))
        if participants != [requester_id] and requester_role not in BULK_BOOKING_ROLES:
            raise NotPermittedError(
                "Only staff supervisors can book a room for other participants."
            )
        return participants

    def _check_conflicts(self, room: Room, start: datetime, end: datetime) -> None:
        status = resolve_status(
            room.id,
            start,
            end,
            [],
            self.calendar.classes_between(room.id, start, end),
            self.calendar.maintenance_between(room.id, start, end),
        )
        if status == SlotStatus.MAINTENANCE:
            raise RoomUnavailableError(
                f"Room {room.id} is scheduled for maintenance during the requested window."
            )
        if status == SlotStatus.CLASS:
            raise ConflictError(f"Room {room.id} has a class during the requested window.")

        buffer_minutes = self.config.policy.buffer_minutes
        buffer = timedelta(minutes=buffer_minutes)
        if self.store.overlapping(room.id, start - buffer, end + buffer, SLOT_HOLDING_STATUSES):
            raise ConflictError(
                f"Room {room.id} is already booked during the requested window"
                + (f" or within {buffer_minutes} minutes of it." if buffer_minutes else ".")
            )
