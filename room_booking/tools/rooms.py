"""
Mock room directory.

In production, this would read room records from the university's facilities
database. Here rooms live in memory, seeded with a handful of campus rooms.
"""

import logging
import threading
from typing import Iterable, Optional

from pydantic import ValidationError

from room_booking.config import SchedulingConfig
from room_booking.errors import ConflictError, InvalidRoomError, RoomNotFoundError
from room_booking.schemas.room_schema import Room, RoomCategory, RoomStatus, RoomUpdate

logger = logging.getLogger(__name__)

DEFAULT_ROOMS: list[Room] = [
    Room(id="A101", name="Lecture Hall A101", building="Main Building", capacity=120,
         category=RoomCategory.LECTURE, floor=1, features=["projector", "microphone"],
         open_hour=9, close_hour=18),
    Room(id="A204", name="Seminar Room A204", building="Main Building", capacity=30,
         category=RoomCategory.SEMINAR, floor=2, features=["whiteboard"]),
    Room(id="B310", name="Seminar Room B310", building="Library", capacity=24,
         category=RoomCategory.SEMINAR, floor=3, features=["whiteboard", "tv screen"]),
    Room(id="C015", name="Study Room C015", building="Student Center", capacity=8,
         category=RoomCategory.OTHER, floor=0),
    Room(id="C120", name="Computer Lab C120", building="Student Center", capacity=40,
         category=RoomCategory.OTHER, floor=1, status=RoomStatus.MAINTENANCE,
         description="Closed for network upgrades."),
]


class RoomDirectory:
    """Read-mostly registry of rooms; writes are administrative."""

    def __init__(self, rooms: Optional[Iterable[Room]] = None) -> None:
        source = DEFAULT_ROOMS if rooms is None else rooms
        self._rooms: dict[str, Room] = {r.id: r.model_copy() for r in source}
        self._lock = threading.Lock()

    def list_rooms(self, category: Optional[RoomCategory] = None) -> list[Room]:
        with self._lock:
            rooms = list(self._rooms.values())
        if category is not None:
            rooms = [r for r in rooms if r.category == category]
        return sorted(rooms, key=lambda r: r.id)

    def get(self, room_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def add(self, room: Room) -> Room:
        with self._lock:
            if room.id in self._rooms:
                raise ConflictError(f"Room {room.id} already exists.")
            self._rooms[room.id] = room
        logger.info("Room added: %s (%s)", room.id, room.name)
        return room

    def update(self, room_id: str, changes: RoomUpdate) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)
            try:
                updated = Room.model_validate(
                    {**room.model_dump(), **changes.model_dump(exclude_unset=True)}
                )
            except ValidationError as exc:
                raise InvalidRoomError(
                    f"Invalid update for room {room_id}: {exc.errors()[0]['msg']}"
                ) from None
            self._rooms[room_id] = updated
        logger.info("Room updated: %s (status: %s)", room_id, updated.status.value)
        return updated

    def remove(self, room_id: str) -> None:
        with self._lock:
            if self._rooms.pop(room_id, None) is None:
                raise RoomNotFoundError(room_id)
        logger.info("Room removed: %s", room_id)


def operating_hours(room: Room, defaults: SchedulingConfig) -> tuple[int, int]:
    """Opening and closing hour for ``room``, falling back to the defaults."""
    open_hour = room.open_hour if room.open_hour is not None else defaults.open_hour
    close_hour = room.close_hour if room.close_hour is not None else defaults.close_hour
    return open_hour, close_hour
