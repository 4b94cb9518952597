"""
HTTP surface of the reservation service.

Actor identity arrives in the ``X-User-Id`` and ``X-User-Role`` headers, set
by the authenticating gateway in front of this service. Booking errors are
turned into JSON ``{"error": code, "detail": message}`` responses.
"""

import logging
import time
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from room_booking.booking.state_machine import ActorRole
from room_booking.errors import BookingError
from room_booking.logging_context import reset_request_id, set_request_id
from room_booking.schemas.api_schema import (
    AccessCodeCheck,
    AccessCodeResult,
    ActionRequest,
    BookingCreate,
    BulkBookingCreate,
    ErrorResponse,
)
from room_booking.schemas.booking_schema import Booking, BookingRequest, BookingStatus, TimeSlot
from room_booking.schemas.room_schema import Room, RoomCategory, RoomUpdate
from room_booking.service import ReservationService

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[str, int] = {
    "invalid_range": status.HTTP_400_BAD_REQUEST,
    "invalid_window": status.HTTP_400_BAD_REQUEST,
    "empty_participants": status.HTTP_400_BAD_REQUEST,
    "invalid_room": status.HTTP_400_BAD_REQUEST,
    "room_unavailable": status.HTTP_409_CONFLICT,
    "conflict": status.HTTP_409_CONFLICT,
    "invalid_transition": status.HTTP_409_CONFLICT,
    "not_permitted": status.HTTP_403_FORBIDDEN,
    "invalid_access_code": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
}

CODE_READER_ROLES = frozenset({ActorRole.GUARD.value, ActorRole.ADMIN.value})

router = APIRouter()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = set_request_id(request_id)

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000
            response.headers["X-Request-Id"] = request_id
            logger.info(
                "%s %s -> %d (%.2f ms)",
                request.method, request.url.path, response.status_code, duration_ms,
            )
            return response
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "%s %s failed after %.2f ms", request.method, request.url.path, duration_ms
            )
            raise
        finally:
            reset_request_id(token)


def get_service(request: Request) -> ReservationService:
    return request.app.state.service


def require_user(x_user_id: Optional[int] = Header(default=None)) -> int:
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    return x_user_id


def optional_user(x_user_id: Optional[int] = Header(default=None)) -> Optional[int]:
    return x_user_id


def current_role(x_user_role: str = Header(default=ActorRole.STUDENT.value)) -> str:
    return x_user_role.strip().lower()


def require_role(role: str, allowed_roles: list[str]) -> None:
    if role not in {r.lower() for r in allowed_roles}:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access forbidden for this role",
        )


def present(booking: Booking, user_id: Optional[int], role: str) -> Booking:
    """Hide the access code from callers who are not on the booking.

    Guards and admins see it because they check it at the door.
    """
    if role in CODE_READER_ROLES or (user_id is not None and booking.involves(user_id)):
        return booking
    return booking.model_copy(update={"secret_code": None})


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST),
        content=ErrorResponse(error=exc.code, detail=str(exc)).model_dump(),
    )


@router.get("/health")
def health(service: ReservationService = Depends(get_service)):
    return {"status": "ok", "service": service.config.service_name}


# ================= ROOMS =================

@router.get("/rooms", response_model=list[Room])
def list_rooms(
    category: Optional[RoomCategory] = None,
    service: ReservationService = Depends(get_service),
):
    return service.list_rooms(category)


@router.get("/rooms/{room_id}", response_model=Room)
def get_room(room_id: str, service: ReservationService = Depends(get_service)):
    return service.get_room(room_id)


@router.get("/rooms/{room_id}/availability", response_model=list[TimeSlot])
def get_availability(
    room_id: str,
    day: date = Query(alias="date"),
    service: ReservationService = Depends(get_service),
):
    return service.get_availability(room_id, day)


@router.get("/rooms/{room_id}/bookings", response_model=list[Booking])
def list_room_bookings(
    room_id: str,
    user_id: Optional[int] = Depends(optional_user),
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    return [present(b, user_id, role) for b in service.list_room_bookings(room_id)]


@router.post("/rooms", response_model=Room, status_code=status.HTTP_201_CREATED)
def create_room(
    data: Room,
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    require_role(role, [ActorRole.ADMIN.value])
    return service.add_room(data)


@router.patch("/rooms/{room_id}", response_model=Room)
def update_room(
    room_id: str,
    data: RoomUpdate,
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    require_role(role, [ActorRole.ADMIN.value])
    return service.update_room(room_id, data)


@router.delete("/rooms/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(
    room_id: str,
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    require_role(role, [ActorRole.ADMIN.value])
    service.delete_room(room_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ================= BOOKINGS =================

@router.get("/bookings", response_model=list[Booking])
def list_bookings(
    booking_status: Optional[BookingStatus] = Query(default=None, alias="status"),
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    require_role(role, [ActorRole.ADMIN.value])
    return service.list_bookings(booking_status)


@router.post("/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    user_id: int = Depends(require_user),
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    participants = data.participant_ids if data.participant_ids is not None else [user_id]
    return service.submit_booking(BookingRequest(
        room_id=data.room_id,
        start_time=data.start_time,
        end_time=data.end_time,
        purpose=data.purpose,
        participant_ids=participants,
        requester_id=user_id,
        requester_role=role,
    ))


@router.post("/bookings/bulk", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_bulk_booking(
    data: BulkBookingCreate,
    user_id: int = Depends(require_user),
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    require_role(role, [ActorRole.STAFF.value, ActorRole.ADMIN.value])
    return service.submit_booking(BookingRequest(
        room_id=data.room_id,
        start_time=data.start_time,
        end_time=data.end_time,
        purpose=data.purpose,
        participant_ids=data.participant_ids,
        requester_id=user_id,
        requester_role=role,
    ))


@router.post("/bookings/validate-access-code", response_model=AccessCodeResult)
def validate_access_code(
    data: AccessCodeCheck,
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    require_role(role, [ActorRole.GUARD.value, ActorRole.ADMIN.value])
    return AccessCodeResult(valid=service.validate_access_code(data.booking_id, data.access_code))


@router.get("/bookings/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: str,
    user_id: Optional[int] = Depends(optional_user),
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    return present(service.get_booking(booking_id), user_id, role)


@router.post("/bookings/{booking_id}/actions/{action}", response_model=Booking)
def transition_booking(
    booking_id: str,
    action: str,
    data: Optional[ActionRequest] = None,
    user_id: Optional[int] = Depends(optional_user),
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    booking = service.transition_status(
        booking_id,
        action,
        role,
        actor_id=user_id,
        access_code=data.access_code if data else None,
    )
    return present(booking, user_id, role)


@router.get("/users/{user_id}/bookings", response_model=list[Booking])
def list_user_bookings(
    user_id: int,
    caller_id: Optional[int] = Depends(optional_user),
    role: str = Depends(current_role),
    service: ReservationService = Depends(get_service),
):
    return [present(b, caller_id, role) for b in service.list_user_bookings(user_id)]


def create_app(service: Optional[ReservationService] = None) -> FastAPI:
    """Build the FastAPI application around ``service`` (a default one if omitted)."""
    app = FastAPI(title="Room Booking Service")
    app.state.service = service or ReservationService()
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(BookingError, booking_error_handler)
    app.include_router(router)
    return app
