"""Shared utilities used across the booking core."""

import secrets
import uuid
from datetime import datetime

ACCESS_CODE_MIN = 1000
ACCESS_CODE_MAX = 9999


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap: [a_start, a_end) and [b_start, b_end).

    Adjacent intervals never overlap.

    Examples:
        >>> from datetime import datetime
        >>> overlaps(datetime(2026, 1, 1, 9), datetime(2026, 1, 1, 10),
        ...          datetime(2026, 1, 1, 10), datetime(2026, 1, 1, 11))
        False
    """
    return a_start < b_end and b_start < a_end


def generate_access_code() -> str:
    """Return a room access code of the form ``NNNN-NNNN``."""
    span = ACCESS_CODE_MAX - ACCESS_CODE_MIN + 1
    first = ACCESS_CODE_MIN + secrets.randbelow(span)
    second = ACCESS_CODE_MIN + secrets.randbelow(span)
    return f"{first}-{second}"


def new_booking_id() -> str:
    return f"BK-{uuid.uuid4().hex[:8].upper()}"
