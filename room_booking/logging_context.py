"""Request ID logging context for tracing a booking request across modules.

The HTTP middleware stores a correlation ID in a ContextVar for the duration
of a request. ``configure_logging`` installs one root handler whose filter
copies that ID onto every record passing through it, so lines from the
validator, the store and the state machine all carry ``[request_id]``
without any module needing a special logger.

Usage:
    from room_booking.logging_context import reset_request_id, set_request_id

    token = set_request_id("REQ-abc123")
    try:
        ...  # every log line shows [REQ-abc123]
    finally:
        reset_request_id(token)
"""

import logging
from contextvars import ContextVar, Token
from typing import IO, Optional

NO_REQUEST_ID = "-"

LOG_FORMAT = "%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)
_handler: Optional[logging.Handler] = None


def set_request_id(request_id: str) -> Token:
    """Set the correlation ID for the current context."""
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def configure_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> logging.Handler:
    """Install the service's root handler, replacing one installed earlier.

    The filter sits on the handler rather than on individual loggers, so
    records from any module (or library) propagating to the root are tagged.
    """
    global _handler

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)

    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    _handler = handler
    return handler
