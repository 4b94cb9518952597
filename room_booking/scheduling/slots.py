"""
Slot generation for a room on a given date.

Slots are contiguous, non-overlapping windows of fixed length covering
[open_hour, close_hour). A trailing remainder shorter than the granularity
is dropped. Pure and deterministic: identical inputs give identical slots.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from room_booking.errors import InvalidRangeError
from room_booking.schemas.booking_schema import SlotStatus, TimeSlot
from room_booking.schemas.room_schema import Room

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


def day_start(day: date, tz: Optional[tzinfo] = None) -> datetime:
    """Midnight at the start of ``day`` in ``tz`` (UTC when omitted)."""
    return datetime.combine(day, time.min, tzinfo=tz or timezone.utc)


def generate_slots(
    room: Room,
    day: date,
    granularity_minutes: int,
    open_hour: int,
    close_hour: int,
    tz: Optional[tzinfo] = None,
) -> list[TimeSlot]:
    """
    Produce the ordered candidate slots for ``room`` on ``day``.

    Every slot starts out ``available``; the availability filter decides
    the real status.

    Raises:
        InvalidRangeError: if open_hour >= close_hour, the hours fall outside
            a single day, or granularity_minutes <= 0.
    """
    if granularity_minutes <= 0:
        raise InvalidRangeError(
            f"Slot granularity must be positive, got {granularity_minutes} minutes."
        )
    if open_hour >= close_hour:
        raise InvalidRangeError(
            f"Opening hour {open_hour} must be before closing hour {close_hour}."
        )
    if open_hour < 0 or close_hour > HOURS_PER_DAY:
        raise InvalidRangeError(
            f"Operating hours {open_hour}-{close_hour} fall outside a single day."
        )

    midnight = day_start(day, tz)
    cursor = midnight + timedelta(hours=open_hour)
    closing = midnight + timedelta(hours=close_hour)
    step = timedelta(minutes=granularity_minutes)

    slots: list[TimeSlot] = []
    while cursor + step <= closing:
        slots.append(TimeSlot(
            room_id=room.id,
            date=day,
            start_time=cursor,
            end_time=cursor + step,
            status=SlotStatus.AVAILABLE,
        ))
        cursor += step

    logger.debug(
        "Generated %d slots for room %s on %s (%02d:00-%02d:00, %d min)",
        len(slots), room.id, day.isoformat(), open_hour, close_hour, granularity_minutes,
    )
    return slots
