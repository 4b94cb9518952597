"""
In-memory booking store.

Stands in for the persistence layer: keeps booking records keyed by id and
answers "all bookings for room R overlapping window W". Check-then-write
sequences run inside ``room_lock(room_id)``, a per-room mutual-exclusion
lock, so two requests for the same room are serialized while requests for
different rooms proceed in parallel.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import ContextManager, Iterable, Iterator, Optional, Protocol

from room_booking.errors import BookingNotFoundError
from room_booking.schemas.booking_schema import Booking, BookingStatus
from room_booking.utils import overlaps

logger = logging.getLogger(__name__)


class BookingStore(Protocol):
    def room_lock(self, room_id: str) -> ContextManager[None]: ...
    def add(self, booking: Booking) -> Booking: ...
    def get(self, booking_id: str) -> Optional[Booking]: ...
    def replace(self, booking: Booking) -> Booking: ...
    def overlapping(
        self,
        room_id: str,
        start: datetime,
        end: datetime,
        statuses: Optional[Iterable[BookingStatus]] = None,
    ) -> list[Booking]: ...
    def for_room(self, room_id: str) -> list[Booking]: ...
    def for_user(self, user_id: int) -> list[Booking]: ...
    def all(self) -> list[Booking]: ...
    def count(self) -> int: ...


class InMemoryBookingStore:
    """Thread-safe dict-backed store with per-room locks."""

    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}
        self._guard = threading.Lock()
        self._room_locks: dict[str, threading.Lock] = {}

    @contextmanager
    def room_lock(self, room_id: str) -> Iterator[None]:
        """Hold the room's lock for the duration of a check-then-write."""
        with self._guard:
            lock = self._room_locks.setdefault(room_id, threading.Lock())
        with lock:
            yield

    def add(self, booking: Booking) -> Booking:
        with self._guard:
            if booking.id in self._bookings:
                raise ValueError(f"Booking {booking.id} already exists")
            self._bookings[booking.id] = booking
        logger.debug("Stored booking %s for room %s", booking.id, booking.room_id)
        return booking

    def get(self, booking_id: str) -> Optional[Booking]:
        with self._guard:
            return self._bookings.get(booking_id)

    def replace(self, booking: Booking) -> Booking:
        with self._guard:
            if booking.id not in self._bookings:
                raise BookingNotFoundError(booking.id)
            self._bookings[booking.id] = booking
        return booking

    def overlapping(
        self,
        room_id: str,
        start: datetime,
        end: datetime,
        statuses: Optional[Iterable[BookingStatus]] = None,
    ) -> list[Booking]:
        """Bookings on ``room_id`` whose window overlaps [start, end)."""
        wanted = set(statuses) if statuses is not None else None
        return [
            b for b in self.for_room(room_id)
            if overlaps(start, end, b.start_time, b.end_time)
            and (wanted is None or b.status in wanted)
        ]

    def for_room(self, room_id: str) -> list[Booking]:
        with self._guard:
            found = [b for b in self._bookings.values() if b.room_id == room_id]
        return sorted(found, key=lambda b: b.start_time)

    def for_user(self, user_id: int) -> list[Booking]:
        with self._guard:
            found = [b for b in self._bookings.values() if b.involves(user_id)]
        return sorted(found, key=lambda b: b.start_time)

    def all(self) -> list[Booking]:
        with self._guard:
            return sorted(self._bookings.values(), key=lambda b: b.start_time)

    def count(self) -> int:
        with self._guard:
            return len(self._bookings)

    def reset(self) -> None:
        """Clear all bookings."""
        with self._guard:
            self._bookings.clear()
