from room_booking.booking.state_machine import (
    ActorRole,
    BookingAction,
    BookingStateMachine,
    TransitionContext,
)
from room_booking.booking.store import InMemoryBookingStore
from room_booking.booking.validator import BookingValidator

__all__ = [
    "ActorRole",
    "BookingAction",
    "BookingStateMachine",
    "TransitionContext",
    "InMemoryBookingStore",
    "BookingValidator",
]
