"""Tests for the availability filter."""

import pytest

from room_booking.scheduling.availability import annotate, resolve_status
from room_booking.scheduling.slots import generate_slots
from room_booking.schemas.booking_schema import BookingStatus, SlotStatus, TimeWindow
from tests.conftest import DAY, at, make_booking


@pytest.fixture
def a101_slots(rooms):
    return generate_slots(rooms.get("A101"), DAY, 30, 9, 18)


def _status_at(slots, hour, minute=0):
    start = at(hour, minute)
    return next(s.status for s in slots if s.start_time == start)


def _window(room_id, start, end, label=""):
    return TimeWindow(room_id=room_id, start_time=start, end_time=end, label=label)


class TestBookedSlots:
    def test_no_blocks_everything_available(self, a101_slots):
        result = annotate(a101_slots, [], [], [])
        assert all(s.status == SlotStatus.AVAILABLE for s in result)

    def test_approved_booking_marks_overlapping_slots(self, a101_slots):
        booking = make_booking(status=BookingStatus.APPROVED, start=at(10), end=at(11))
        result = annotate(a101_slots, [booking], [], [])
        assert _status_at(result, 9, 30) == SlotStatus.AVAILABLE
        assert _status_at(result, 10) == SlotStatus.BOOKED
        assert _status_at(result, 10, 30) == SlotStatus.BOOKED
        assert _status_at(result, 11) == SlotStatus.AVAILABLE

    def test_partial_overlap_counts(self, a101_slots):
        booking = make_booking(status=BookingStatus.APPROVED, start=at(10, 15), end=at(10, 45))
        result = annotate(a101_slots, [booking], [], [])
        assert _status_at(result, 10) == SlotStatus.BOOKED
        assert _status_at(result, 10, 30) == SlotStatus.BOOKED
        assert _status_at(result, 11) == SlotStatus.AVAILABLE

    @pytest.mark.parametrize(
        "status",
        [
            BookingStatus.PENDING,
            BookingStatus.CONFIRMED,
            BookingStatus.KEY_REQUESTED,
            BookingStatus.KEY_ISSUED,
        ],
    )
    def test_live_statuses_hold_the_slot(self, a101_slots, status):
        result = annotate(a101_slots, [make_booking(status=status)], [], [])
        assert _status_at(result, 10) == SlotStatus.BOOKED

    @pytest.mark.parametrize(
        "status",
        [
            BookingStatus.REJECTED,
            BookingStatus.CANCELLED,
            BookingStatus.COMPLETED,
            BookingStatus.OVERDUE,
        ],
    )
    def test_terminal_statuses_release_the_slot(self, a101_slots, status):
        result = annotate(a101_slots, [make_booking(status=status)], [], [])
        assert _status_at(result, 10) == SlotStatus.AVAILABLE

    def test_other_room_is_ignored(self, a101_slots):
        booking = make_booking(room_id="A204", status=BookingStatus.APPROVED)
        result = annotate(a101_slots, [booking], [], [])
        assert _status_at(result, 10) == SlotStatus.AVAILABLE


class TestPriority:
    def test_class_block(self, a101_slots):
        lecture = _window("A101", at(14), at(15, 30), "Linear Algebra")
        result = annotate(a101_slots, [], [lecture], [])
        assert _status_at(result, 13, 30) == SlotStatus.AVAILABLE
        assert _status_at(result, 14) == SlotStatus.CLASS
        assert _status_at(result, 15) == SlotStatus.CLASS
        assert _status_at(result, 15, 30) == SlotStatus.AVAILABLE

    def test_class_beats_booking(self, a101_slots):
        booking = make_booking(status=BookingStatus.APPROVED)
        lecture = _window("A101", at(10), at(11))
        result = annotate(a101_slots, [booking], [lecture], [])
        assert _status_at(result, 10) == SlotStatus.CLASS

    def test_maintenance_beats_everything(self, a101_slots):
        booking = make_booking(status=BookingStatus.APPROVED)
        lecture = _window("A101", at(10), at(11))
        works = _window("A101", at(9), at(12), "Projector replacement")
        result = annotate(a101_slots, [booking], [lecture], [works])
        assert _status_at(result, 10) == SlotStatus.MAINTENANCE
        assert _status_at(result, 11, 30) == SlotStatus.MAINTENANCE
        assert _status_at(result, 12) == SlotStatus.AVAILABLE

    def test_resolve_single_window(self):
        works = _window("A101", at(9), at(10))
        assert resolve_status("A101", at(9, 30), at(10, 30), [], [], [works]) == SlotStatus.MAINTENANCE
        assert resolve_status("A101", at(10), at(10, 30), [], [], [works]) == SlotStatus.AVAILABLE


class TestPurity:
    def test_idempotent(self, a101_slots):
        booking = make_booking(status=BookingStatus.APPROVED)
        lecture = _window("A101", at(14), at(15))
        once = annotate(a101_slots, [booking], [lecture], [])
        twice = annotate(once, [booking], [lecture], [])
        assert once == twice

    def test_stale_status_is_recomputed(self, a101_slots):
        booked = annotate(a101_slots, [make_booking(status=BookingStatus.APPROVED)], [], [])
        cleared = annotate(booked, [], [], [])
        assert all(s.status == SlotStatus.AVAILABLE for s in cleared)

    def test_input_slots_untouched(self, a101_slots):
        annotate(a101_slots, [make_booking(status=BookingStatus.APPROVED)], [], [])
        assert all(s.status == SlotStatus.AVAILABLE for s in a101_slots)

    def test_order_and_length_preserved(self, a101_slots):
        result = annotate(a101_slots, [], [], [])
        assert [s.start_time for s in result] == [s.start_time for s in a101_slots]
