"""
Mock campus calendar feed.

In production, this would pull the timetable of scheduled classes and the
facilities maintenance plan from the registrar's scheduling system. Both are
fixed blocks this service can read but never cancel.
"""

import logging
import threading
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional

from room_booking.schemas.booking_schema import TimeWindow
from room_booking.scheduling.slots import day_start
from room_booking.utils import overlaps

logger = logging.getLogger(__name__)


class CalendarFeed:
    """Class timetable and maintenance windows per room."""

    def __init__(
        self,
        classes: Optional[Iterable[TimeWindow]] = None,
        maintenance: Optional[Iterable[TimeWindow]] = None,
    ) -> None:
        self._classes: list[TimeWindow] = list(classes or [])
        self._maintenance: list[TimeWindow] = list(maintenance or [])
        self._lock = threading.Lock()

    def add_class(self, window: TimeWindow) -> None:
        with self._lock:
            self._classes.append(window)
        logger.debug("Class block added for %s: %s", window.room_id, window.label)

    def add_maintenance(self, window: TimeWindow) -> None:
        with self._lock:
            self._maintenance.append(window)
        logger.debug("Maintenance block added for %s: %s", window.room_id, window.label)

    def classes_between(self, room_id: str, start: datetime, end: datetime) -> list[TimeWindow]:
        with self._lock:
            return _select(self._classes, room_id, start, end)

    def maintenance_between(self, room_id: str, start: datetime, end: datetime) -> list[TimeWindow]:
        with self._lock:
            return _select(self._maintenance, room_id, start, end)

    def classes_on(self, room_id: str, day: date, tz: Optional[tzinfo] = None) -> list[TimeWindow]:
        start = day_start(day, tz)
        return self.classes_between(room_id, start, start + timedelta(days=1))

    def maintenance_on(self, room_id: str, day: date, tz: Optional[tzinfo] = None) -> list[TimeWindow]:
        start = day_start(day, tz)
        return self.maintenance_between(room_id, start, start + timedelta(days=1))


def _select(windows: list[TimeWindow], room_id: str, start: datetime, end: datetime) -> list[TimeWindow]:
    return sorted(
        (w for w in windows
         if w.room_id == room_id and overlaps(start, end, w.start_time, w.end_time)),
        key=lambda w: w.start_time,
    )
