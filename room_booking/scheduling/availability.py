"""
Availability filter: resolves the status of candidate slots.

Priority, most restrictive first:
    maintenance > class > booked > available

Two windows [a, b) and [c, d) collide iff a < d and c < b, so a slot that
ends exactly when a booking starts stays available. The filter never looks
at the incoming slot status, which makes it idempotent.
"""

from datetime import datetime
from typing import Iterable, Sequence

from room_booking.schemas.booking_schema import Booking, SlotStatus, TimeSlot, TimeWindow
from room_booking.utils import overlaps


def _hits(room_id: str, start: datetime, end: datetime, windows: Iterable[TimeWindow]) -> bool:
    return any(
        w.room_id == room_id and overlaps(start, end, w.start_time, w.end_time)
        for w in windows
    )


def resolve_status(
    room_id: str,
    start: datetime,
    end: datetime,
    existing_bookings: Sequence[Booking],
    class_schedule: Sequence[TimeWindow],
    maintenance_windows: Sequence[TimeWindow],
) -> SlotStatus:
    """Status of a single [start, end) window on ``room_id``."""
    if _hits(room_id, start, end, maintenance_windows):
        return SlotStatus.MAINTENANCE
    if _hits(room_id, start, end, class_schedule):
        return SlotStatus.CLASS
    for booking in existing_bookings:
        if (
            booking.room_id == room_id
            and booking.holds_slot
            and overlaps(start, end, booking.start_time, booking.end_time)
        ):
            return SlotStatus.BOOKED
    return SlotStatus.AVAILABLE


def annotate(
    slots: Sequence[TimeSlot],
    existing_bookings: Sequence[Booking],
    class_schedule: Sequence[TimeWindow],
    maintenance_windows: Sequence[TimeWindow],
) -> list[TimeSlot]:
    """Return copies of ``slots`` with their status populated."""
    return [
        slot.model_copy(update={
            "status": resolve_status(
                slot.room_id,
                slot.start_time,
                slot.end_time,
                existing_bookings,
                class_schedule,
                maintenance_windows,
            ),
        })
        for slot in slots
    ]
