"""Tests for configuration loading and validation."""

import pytest

from room_booking.config import (
    AppConfig,
    KeyConfig,
    PolicyConfig,
    SchedulingConfig,
    _safe_int,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_open_hour_after_close(self):
        config = AppConfig(scheduling=SchedulingConfig(open_hour=18, close_hour=9))
        with pytest.raises(ValueError, match="ROOM_OPEN_HOUR"):
            _validate_config(config)

    def test_close_hour_past_midnight(self):
        config = AppConfig(scheduling=SchedulingConfig(open_hour=8, close_hour=25))
        with pytest.raises(ValueError, match="ROOM_CLOSE_HOUR"):
            _validate_config(config)

    def test_zero_slot_minutes(self):
        config = AppConfig(scheduling=SchedulingConfig(slot_minutes=0))
        with pytest.raises(ValueError, match="SLOT_MINUTES"):
            _validate_config(config)

    def test_unknown_timezone(self):
        config = AppConfig(scheduling=SchedulingConfig(timezone="Mars/Olympus_Mons"))
        with pytest.raises(ValueError, match="ROOM_TIMEZONE"):
            _validate_config(config)

    def test_max_duration_below_min(self):
        config = AppConfig(policy=PolicyConfig(min_booking_minutes=60, max_booking_minutes=30))
        with pytest.raises(ValueError, match="MAX_BOOKING_MINUTES"):
            _validate_config(config)

    def test_zero_advance_days(self):
        config = AppConfig(policy=PolicyConfig(max_advance_days=0))
        with pytest.raises(ValueError, match="MAX_ADVANCE_DAYS"):
            _validate_config(config)

    def test_negative_grace(self):
        config = AppConfig(keys=KeyConfig(overdue_grace_minutes=-1))
        with pytest.raises(ValueError, match="KEY_OVERDUE_GRACE_MINUTES"):
            _validate_config(config)

    def test_negative_buffer(self):
        config = AppConfig(policy=PolicyConfig(buffer_minutes=-5))
        with pytest.raises(ValueError, match="BUFFER_MINUTES"):
            _validate_config(config)

    def test_safe_int_parsing(self):
        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("ROOM_BOOKING_TEST_INT", "ten")
        with pytest.raises(ValueError, match="ROOM_BOOKING_TEST_INT"):
            _safe_int("ROOM_BOOKING_TEST_INT", "10")

    def test_tzinfo_property(self):
        assert SchedulingConfig(timezone="Europe/Berlin").tzinfo.key == "Europe/Berlin"
