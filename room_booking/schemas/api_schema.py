"""Request and response bodies for the HTTP surface."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    room_id: str
    start_time: datetime
    end_time: datetime
    purpose: str = ""
    participant_ids: Optional[list[int]] = None


class BulkBookingCreate(BaseModel):
    room_id: str
    start_time: datetime
    end_time: datetime
    purpose: str = ""
    participant_ids: list[int] = Field(default_factory=list)


class ActionRequest(BaseModel):
    access_code: Optional[str] = None


class AccessCodeCheck(BaseModel):
    booking_id: str
    access_code: str


class AccessCodeResult(BaseModel):
    valid: bool


class ErrorResponse(BaseModel):
    error: str
    detail: str
