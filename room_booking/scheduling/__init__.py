from room_booking.scheduling.availability import annotate, resolve_status
from room_booking.scheduling.slots import generate_slots

__all__ = ["generate_slots", "annotate", "resolve_status"]
