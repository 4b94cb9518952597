"""
Centralized configuration with environment variable overrides.

Operating hours, booking policy limits, and key-handoff thresholds are
configurable here. Nothing is hardcoded in the scheduling or booking logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from room_booking.logging_context import configure_logging

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class SchedulingConfig:
    """Default operating hours and slot granularity for rooms."""

    open_hour: int = _safe_int("ROOM_OPEN_HOUR", "8")
    close_hour: int = _safe_int("ROOM_CLOSE_HOUR", "21")
    slot_minutes: int = _safe_int("SLOT_MINUTES", "60")
    timezone: str = os.getenv("ROOM_TIMEZONE", "UTC")

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class PolicyConfig:
    """Limits a booking request must respect."""

    min_booking_minutes: int = _safe_int("MIN_BOOKING_MINUTES", "30")
    max_booking_minutes: int = _safe_int("MAX_BOOKING_MINUTES", "180")
    max_advance_days: int = _safe_int("MAX_ADVANCE_DAYS", "14")
    buffer_minutes: int = _safe_int("BUFFER_MINUTES", "15")


@dataclass(frozen=True)
class KeyConfig:
    """Key handoff thresholds."""

    overdue_grace_minutes: int = _safe_int("KEY_OVERDUE_GRACE_MINUTES", "15")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    keys: KeyConfig = field(default_factory=KeyConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "room-booking")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    sched = config.scheduling
    if not 0 <= sched.open_hour < sched.close_hour <= 24:
        raise ValueError(
            "ROOM_OPEN_HOUR and ROOM_CLOSE_HOUR must satisfy 0 <= open < close <= 24, "
            f"got {sched.open_hour} and {sched.close_hour}"
        )
    if sched.slot_minutes < 1:
        raise ValueError(f"SLOT_MINUTES must be >= 1, got {sched.slot_minutes}")
    try:
        ZoneInfo(sched.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"ROOM_TIMEZONE is not a known timezone: {sched.timezone!r}") from None

    policy = config.policy
    if policy.min_booking_minutes < 1:
        raise ValueError(
            f"MIN_BOOKING_MINUTES must be >= 1, got {policy.min_booking_minutes}"
        )
    if policy.max_booking_minutes < policy.min_booking_minutes:
        raise ValueError(
            "MAX_BOOKING_MINUTES must be >= MIN_BOOKING_MINUTES, "
            f"got {policy.max_booking_minutes} < {policy.min_booking_minutes}"
        )
    if policy.max_advance_days < 1:
        raise ValueError(f"MAX_ADVANCE_DAYS must be >= 1, got {policy.max_advance_days}")
    if policy.buffer_minutes < 0:
        raise ValueError(f"BUFFER_MINUTES must be >= 0, got {policy.buffer_minutes}")

    if config.keys.overdue_grace_minutes < 0:
        raise ValueError(
            "KEY_OVERDUE_GRACE_MINUTES must be >= 0, "
            f"got {config.keys.overdue_grace_minutes}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    configure_logging(config.log_level)
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
