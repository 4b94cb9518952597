"""
Caller-facing reservation service.

Ties the room directory, the campus calendar, the booking store, the
validator and the status state machine together behind the three core
operations (availability, submit, transition) plus the listing and
administration calls the web client needs. Every method either returns
its result or raises a ``BookingError``.
"""

import logging
from datetime import date, timedelta
from typing import Optional, Union

from room_booking.booking.state_machine import (
    ActorRole,
    BookingAction,
    BookingStateMachine,
    TransitionContext,
)
from room_booking.booking.store import BookingStore, InMemoryBookingStore
from room_booking.booking.validator import BookingValidator
from room_booking.clock import Clock, SystemClock
from room_booking.config import AppConfig, settings
from room_booking.errors import (
    BookingError,
    BookingNotFoundError,
    ConflictError,
    InvalidTransitionError,
    NotPermittedError,
)
from room_booking.scheduling.availability import annotate
from room_booking.scheduling.slots import day_start, generate_slots
from room_booking.schemas.booking_schema import (
    SLOT_HOLDING_STATUSES,
    Booking,
    BookingRequest,
    BookingStatus,
    TimeSlot,
)
from room_booking.schemas.room_schema import Room, RoomCategory, RoomUpdate
from room_booking.tools.calendar import CalendarFeed
from room_booking.tools.rooms import RoomDirectory, operating_hours

logger = logging.getLogger(__name__)


class ReservationService:
    """Single entry point for availability queries and booking lifecycle."""

    def __init__(
        self,
        rooms: Optional[RoomDirectory] = None,
        calendar: Optional[CalendarFeed] = None,
        store: Optional[BookingStore] = None,
        clock: Optional[Clock] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.config = config or settings
        self.rooms = rooms or RoomDirectory()
        self.calendar = calendar or CalendarFeed()
        self.store = store or InMemoryBookingStore()
        self.clock = clock or SystemClock(self.config.scheduling.tzinfo)
        self.machine = BookingStateMachine()
        self.validator = BookingValidator(
            self.rooms, self.store, self.calendar, self.clock, self.config
        )

    # --- Availability ---

    def get_availability(self, room_id: str, day: date) -> list[TimeSlot]:
        """Annotated slots for ``room_id`` on ``day``, generated fresh per call."""
        room = self.rooms.get(room_id)
        sched = self.config.scheduling
        tz = sched.tzinfo
        open_hour, close_hour = operating_hours(room, sched)
        slots = generate_slots(room, day, sched.slot_minutes, open_hour, close_hour, tz=tz)

        start = day_start(day, tz)
        end = start + timedelta(days=1)
        return annotate(
            slots,
            self.store.overlapping(room.id, start, end, SLOT_HOLDING_STATUSES),
            self.calendar.classes_between(room.id, start, end),
            self.calendar.maintenance_between(room.id, start, end),
        )

    # --- Submission ---

    def submit_booking(self, request: BookingRequest) -> Booking:
        """Validate and persist ``request`` as a single pending booking."""
        room = self.rooms.get(request.room_id)
        try:
            return self.validator.submit(
                room,
                request.start_time,
                request.end_time,
                request.purpose,
                request.participant_ids,
                request.requester_id,
                request.requester_role,
            )
        except BookingError as exc:
            logger.info(
                "Booking rejected for room %s by user %s: %s",
                request.room_id, request.requester_id, exc.code,
            )
            raise

    # --- Status transitions ---

    def transition_status(
        self,
        booking_id: str,
        action: Union[BookingAction, str],
        actor_role: Union[ActorRole, str],
        actor_id: Optional[int] = None,
        access_code: Optional[str] = None,
    ) -> Booking:
        """Apply ``action`` to a booking atomically and persist the result."""
        try:
            action = BookingAction(action)
        except ValueError:
            raise InvalidTransitionError(f"Unknown action: {action!r}") from None
        try:
            actor_role = ActorRole(actor_role)
        except ValueError:
            raise NotPermittedError(f"Unknown actor role: {actor_role!r}") from None
        booking = self.get_booking(booking_id)

        with self.store.room_lock(booking.room_id):
            current = self.get_booking(booking_id)
            ctx = TransitionContext(
                actor_role=actor_role,
                now=self.clock.now(),
                actor_id=actor_id,
                access_code=access_code,
                overdue_grace=timedelta(minutes=self.config.keys.overdue_grace_minutes),
            )
            updated = self.machine.apply(current, action, ctx)
            return self.store.replace(updated)

    def mark_overdue_bookings(self) -> list[Booking]:
        """Move every key-issued booking past its grace period to ``overdue``."""
        grace = timedelta(minutes=self.config.keys.overdue_grace_minutes)
        now = self.clock.now()
        overdue = []
        for booking in self.store.all():
            if booking.status != BookingStatus.KEY_ISSUED or now <= booking.end_time + grace:
                continue
            try:
                overdue.append(
                    self.transition_status(booking.id, BookingAction.MARK_OVERDUE, ActorRole.SYSTEM)
                )
            except InvalidTransitionError as exc:
                # returned or cancelled since the scan started
                logger.info("Skipping overdue check for %s: %s", booking.id, exc)
        if overdue:
            logger.info("Marked %d booking(s) overdue", len(overdue))
        return overdue

    def validate_access_code(self, booking_id: str, access_code: str) -> bool:
        booking = self.get_booking(booking_id)
        return booking.secret_code is not None and booking.secret_code == access_code

    # --- Lookups ---

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.store.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def list_bookings(self, status: Optional[BookingStatus] = None) -> list[Booking]:
        """Every booking, optionally narrowed to one status."""
        bookings = self.store.all()
        if status is not None:
            bookings = [b for b in bookings if b.status == status]
        return bookings

    def list_user_bookings(self, user_id: int) -> list[Booking]:
        return self.store.for_user(user_id)

    def list_room_bookings(self, room_id: str) -> list[Booking]:
        self.rooms.get(room_id)
        return self.store.for_room(room_id)

    # --- Room administration ---

    def list_rooms(self, category: Optional[RoomCategory] = None) -> list[Room]:
        return self.rooms.list_rooms(category)

    def get_room(self, room_id: str) -> Room:
        return self.rooms.get(room_id)

    def add_room(self, room: Room) -> Room:
        return self.rooms.add(room)

    def update_room(self, room_id: str, changes: RoomUpdate) -> Room:
        return self.rooms.update(room_id, changes)

    def delete_room(self, room_id: str) -> None:
        """Remove a room unless it still has live bookings."""
        self.rooms.get(room_id)
        with self.store.room_lock(room_id):
            live = [b for b in self.store.for_room(room_id) if not b.is_terminal]
            if live:
                raise ConflictError(
                    f"Room {room_id} has {len(live)} active booking(s) and cannot be removed."
                )
            self.rooms.remove(room_id)
