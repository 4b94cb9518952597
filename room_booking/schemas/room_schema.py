"""Room directory data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class RoomCategory(str, Enum):
    LECTURE = "lecture"
    SEMINAR = "seminar"
    OTHER = "other"


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    UNAVAILABLE = "unavailable"


class Room(BaseModel):
    """A bookable room.

    ``open_hour``/``close_hour`` override the configured operating hours
    when set.
    """
    id: str
    name: str
    building: str
    capacity: int
    category: RoomCategory = RoomCategory.OTHER
    status: RoomStatus = RoomStatus.AVAILABLE
    floor: Optional[int] = None
    features: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    open_hour: Optional[int] = Field(default=None, ge=0, le=24)
    close_hour: Optional[int] = Field(default=None, ge=0, le=24)

    @model_validator(mode="after")
    def _check_hours(self) -> "Room":
        if (
            self.open_hour is not None
            and self.close_hour is not None
            and self.open_hour >= self.close_hour
        ):
            raise ValueError(
                f"open_hour {self.open_hour} must be before close_hour {self.close_hour}"
            )
        return self


class RoomUpdate(BaseModel):
    """Partial room update applied by an administrator."""
    name: Optional[str] = None
    building: Optional[str] = None
    capacity: Optional[int] = None
    category: Optional[RoomCategory] = None
    status: Optional[RoomStatus] = None
    floor: Optional[int] = None
    features: Optional[list[str]] = None
    description: Optional[str] = None
    open_hour: Optional[int] = None
    close_hour: Optional[int] = None
