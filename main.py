"""
Room booking HTTP service entry point.

Builds the FastAPI app around a default ReservationService and serves it
with uvicorn. Supports a console mode that runs the offline demo instead.

Usage:
    HTTP service: python main.py
    Console mode: python main.py console
"""

import logging
import os
import sys

from room_booking.config import settings

logger = logging.getLogger(__name__)


def _run_http_mode() -> None:
    """Serve the reservation API (in-memory store, seeded rooms)."""
    import uvicorn

    from room_booking.api import create_app

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info("Starting %s on %s:%d", settings.service_name, host, port)
    uvicorn.run(create_app(), host=host, port=port, log_level=settings.log_level.lower())


def _run_console_mode() -> None:
    """Start the offline console demo."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_http_mode()
