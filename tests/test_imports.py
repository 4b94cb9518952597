"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

import pytest


class TestSchemaImports:
    def test_import_booking_schema(self):
        from room_booking.schemas.booking_schema import (
            Booking, BookingRequest, BookingStatus, SlotStatus, TimeSlot,
        )
        assert BookingStatus.KEY_ISSUED == "key_issued"
        assert SlotStatus.MAINTENANCE == "maintenance"

    def test_import_room_schema(self):
        from room_booking.schemas.room_schema import Room, RoomCategory, RoomStatus
        assert RoomCategory.LECTURE == "lecture"
        assert RoomStatus.AVAILABLE == "available"


class TestPackageImports:
    def test_import_scheduling_package(self):
        from room_booking.scheduling import annotate, generate_slots, resolve_status
        assert callable(generate_slots)
        assert callable(annotate)

    def test_import_booking_package(self):
        from room_booking.booking import (
            ActorRole, BookingAction, BookingStateMachine,
            BookingValidator, InMemoryBookingStore, TransitionContext,
        )
        assert InMemoryBookingStore().count() == 0
        assert len(BookingStateMachine.TRANSITIONS) >= 11

    def test_import_errors(self):
        from room_booking.errors import (
            BookingError, ConflictError, EmptyParticipantsError, InvalidRangeError,
            InvalidTransitionError, InvalidWindowError, RoomUnavailableError,
        )
        for cls in (
            ConflictError, EmptyParticipantsError, InvalidRangeError,
            InvalidTransitionError, InvalidWindowError, RoomUnavailableError,
        ):
            assert issubclass(cls, BookingError)
        assert ConflictError.retryable
        assert not InvalidWindowError.retryable

    def test_version(self):
        import room_booking
        assert room_booking.__version__


class TestToolImports:
    def test_room_directory_seed(self):
        from room_booking.tools.rooms import DEFAULT_ROOMS, RoomDirectory
        directory = RoomDirectory()
        assert len(directory.list_rooms()) == len(DEFAULT_ROOMS)
        assert directory.get("A101").open_hour == 9

    def test_calendar_starts_empty(self):
        from room_booking.tools.calendar import CalendarFeed
        from tests.conftest import DAY
        assert CalendarFeed().classes_on("A101", DAY) == []

    def test_calendar_day_lookup(self):
        from room_booking.schemas.booking_schema import TimeWindow
        from room_booking.tools.calendar import CalendarFeed
        from tests.conftest import DAY, at
        works = TimeWindow(room_id="A204", start_time=at(8), end_time=at(10))
        calendar = CalendarFeed(maintenance=[works])
        assert calendar.maintenance_on("A204", DAY) == [works]
        assert calendar.maintenance_on("A101", DAY) == []


class TestConfigImport:
    def test_import_config(self):
        from room_booking.config import settings
        assert settings.scheduling.slot_minutes >= 1
        assert settings.policy.max_booking_minutes >= settings.policy.min_booking_minutes


class TestApiImport:
    def test_create_app_with_default_service(self):
        from room_booking.api import create_app
        app = create_app()
        assert app.state.service.list_rooms()


class TestConsoleDemo:
    def test_console_session_imports(self):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        assert session.service.store.count() == 0
        assert session.last_booking_id is None

    @pytest.mark.parametrize("scenario", ["booking", "conflict", "bulk"])
    def test_scenarios_run(self, scenario, capsys):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        session.run_scenario(scenario)
        assert f"Scenario '{scenario}' complete." in capsys.readouterr().out

    def test_booking_scenario_ends_completed(self):
        from console_demo import ConsoleSession
        from room_booking.schemas.booking_schema import BookingStatus
        session = ConsoleSession()
        session.run_scenario("booking")
        booking = session.service.get_booking(session.last_booking_id)
        assert booking.status == BookingStatus.COMPLETED
