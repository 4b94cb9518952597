"""Booking error taxonomy.

All errors are recoverable business-rule violations. Each carries a stable
``code`` that the HTTP layer returns to clients. Only ``ConflictError`` is
worth retrying, and only after re-fetching availability.
"""


class BookingError(Exception):
    """Base class for every rejection raised by the booking core."""

    code = "booking_error"
    retryable = False


class InvalidRangeError(BookingError):
    """Operating hours or slot granularity cannot produce any slot."""

    code = "invalid_range"


class InvalidWindowError(BookingError):
    """Requested start/end window is malformed, in the past, or out of policy."""

    code = "invalid_window"


class EmptyParticipantsError(BookingError):
    code = "empty_participants"


class RoomUnavailableError(BookingError):
    """Room is under maintenance or withdrawn from booking."""

    code = "room_unavailable"


class ConflictError(BookingError):
    """Requested window collides with a booking or a scheduled class."""

    code = "conflict"
    retryable = True


class InvalidTransitionError(BookingError):
    """Raised when a status transition is not valid from the current state."""

    code = "invalid_transition"


class NotPermittedError(BookingError):
    """Actor role or identity is not allowed to perform the action."""

    code = "not_permitted"


class InvalidAccessCodeError(BookingError):
    code = "invalid_access_code"


class InvalidRoomError(BookingError):
    """A room record or update would leave the room in an unusable state."""

    code = "invalid_room"


class NotFoundError(BookingError):
    code = "not_found"


class RoomNotFoundError(NotFoundError):
    def __init__(self, room_id: str) -> None:
        super().__init__(f"Room {room_id} not found.")
        self.room_id = room_id


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking {booking_id} not found.")
        self.booking_id = booking_id
