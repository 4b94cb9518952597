"""Room reservation core: slot availability, booking validation, and status lifecycle."""

__version__ = "0.1.0"
