"""
Offline console demo: walks through room bookings without any server.

Uses the real slot generator, availability filter, validator, state machine
and in-memory store, driven by a fixed clock so every run prints the same
timeline. Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario conflict
    python console_demo.py --scenario bulk
"""

import argparse
import shlex
from datetime import date, datetime, timedelta
from typing import Optional

from room_booking.booking.state_machine import ActorRole, BookingAction
from room_booking.clock import FixedClock
from room_booking.config import settings
from room_booking.errors import BookingError
from room_booking.schemas.booking_schema import BookingRequest, SlotStatus, TimeWindow
from room_booking.scheduling.slots import day_start
from room_booking.service import ReservationService
from room_booking.tools.calendar import CalendarFeed

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

STATUS_COLORS = {
    SlotStatus.AVAILABLE: GREEN,
    SlotStatus.BOOKED: RED,
    SlotStatus.CLASS: YELLOW,
    SlotStatus.MAINTENANCE: DIM,
}

DEMO_DAY = date(2026, 3, 3)


def _demo_calendar() -> CalendarFeed:
    tz = settings.scheduling.tzinfo
    midnight = day_start(DEMO_DAY, tz)
    calendar = CalendarFeed()
    calendar.add_class(TimeWindow(
        room_id="A101",
        start_time=midnight + timedelta(hours=14),
        end_time=midnight + timedelta(hours=15, minutes=30),
        label="Linear Algebra (lecture)",
    ))
    calendar.add_maintenance(TimeWindow(
        room_id="A204",
        start_time=midnight + timedelta(hours=8),
        end_time=midnight + timedelta(hours=10),
        label="Projector replacement",
    ))
    return calendar


class ConsoleSession:
    """Runs booking scenarios against an in-process ReservationService."""

    def __init__(self) -> None:
        tz = settings.scheduling.tzinfo
        self.clock = FixedClock(day_start(DEMO_DAY, tz) - timedelta(hours=15))
        self.service = ReservationService(calendar=_demo_calendar(), clock=self.clock)
        self.last_booking_id: Optional[str] = None

    def say(self, who: str, text: str) -> None:
        print(f"{BLUE}{BOLD}[{who}]{RESET} {text}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def error(self, exc: BookingError) -> None:
        print(f"{RED}  !! {exc.code}: {exc}{RESET}")

    def at(self, hour: int, minute: int = 0) -> datetime:
        return day_start(DEMO_DAY, settings.scheduling.tzinfo) + timedelta(hours=hour, minutes=minute)

    # ------------------------------------------------------------------ #
    # Building blocks
    # ------------------------------------------------------------------ #

    def show_availability(self, room_id: str, day: date = DEMO_DAY) -> None:
        try:
            slots = self.service.get_availability(room_id, day)
        except BookingError as exc:
            self.error(exc)
            return
        print(f"{BOLD}  {room_id} on {day.isoformat()}{RESET}")
        for slot in slots:
            color = STATUS_COLORS[slot.status]
            print(
                f"    {slot.start_time:%H:%M}-{slot.end_time:%H:%M}  "
                f"{color}{slot.status.value}{RESET}"
            )

    def book(
        self,
        who: str,
        user_id: int,
        room_id: str,
        start: datetime,
        end: datetime,
        participants: Optional[list[int]] = None,
        role: str = ActorRole.STUDENT.value,
        purpose: str = "Study group",
    ) -> Optional[str]:
        self.say(who, f"Book {room_id} {start:%H:%M}-{end:%H:%M} for {participants or [user_id]}")
        try:
            booking = self.service.submit_booking(BookingRequest(
                room_id=room_id,
                start_time=start,
                end_time=end,
                purpose=purpose,
                participant_ids=participants or [user_id],
                requester_id=user_id,
                requester_role=role,
            ))
        except BookingError as exc:
            self.error(exc)
            return None
        self.system_log(f"{booking.id} created, status {booking.status.value}")
        self.last_booking_id = booking.id
        return booking.id

    def act(
        self,
        who: str,
        booking_id: str,
        action: BookingAction,
        role: ActorRole,
        actor_id: Optional[int] = None,
        access_code: Optional[str] = None,
    ) -> None:
        self.say(who, f"{action.value} {booking_id}")
        try:
            booking = self.service.transition_status(
                booking_id, action, role, actor_id=actor_id, access_code=access_code
            )
        except BookingError as exc:
            self.error(exc)
            return
        extra = f", access code {booking.secret_code}" if booking.secret_code else ""
        self.system_log(f"{booking.id} is now {booking.status.value}{extra}")

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    def scenario_booking(self) -> None:
        self.show_availability("A101")
        booking_id = self.book("Student 7", 7, "A101", self.at(10), self.at(11))
        if booking_id is None:
            return
        self.act("Admin", booking_id, BookingAction.APPROVE, ActorRole.ADMIN, actor_id=1)
        self.act("Student 7", booking_id, BookingAction.REQUEST_KEY, ActorRole.STUDENT, actor_id=7)

        self.clock.set(self.at(9, 55))
        self.system_log(f"Clock: {self.clock.now():%Y-%m-%d %H:%M}")
        self.act("Guard", booking_id, BookingAction.ISSUE_KEY, ActorRole.GUARD,
                 access_code="0000-0000")
        code = self.service.get_booking(booking_id).secret_code
        self.act("Guard", booking_id, BookingAction.ISSUE_KEY, ActorRole.GUARD, access_code=code)
        self.act("Guard", booking_id, BookingAction.COMPLETE, ActorRole.GUARD)

        self.clock.set(self.at(11, 5))
        self.system_log(f"Clock: {self.clock.now():%Y-%m-%d %H:%M}")
        self.act("Guard", booking_id, BookingAction.COMPLETE, ActorRole.GUARD)
        self.act("Guard", booking_id, BookingAction.APPROVE, ActorRole.GUARD)

    def scenario_conflict(self) -> None:
        first = self.book("Student 7", 7, "A101", self.at(10), self.at(11))
        if first:
            self.act("Admin", first, BookingAction.APPROVE, ActorRole.ADMIN, actor_id=1)
        self.book("Student 8", 8, "A101", self.at(10), self.at(10, 30))
        self.book("Student 8", 8, "A101", self.at(14, 30), self.at(15))
        self.book("Student 8", 8, "A204", self.at(9), self.at(10))
        self.book("Student 8", 8, "C120", self.at(12), self.at(13))
        self.book("Student 8", 8, "A101", self.at(11), self.at(12))
        self.book("Student 8", 8, "A101", self.at(11, 15), self.at(12, 15))
        self.show_availability("A101")

    def scenario_bulk(self) -> None:
        self.book("Student 7", 7, "B310", self.at(12), self.at(13), participants=[7, 8, 9])
        booking_id = self.book(
            "Staff 40", 40, "B310", self.at(12), self.at(13),
            participants=[41, 42, 43], role=ActorRole.STAFF.value, purpose="Department meeting",
        )
        if booking_id is None:
            return
        self.act("Staff 41", booking_id, BookingAction.CANCEL, ActorRole.STAFF, actor_id=41)
        self.act("Admin", booking_id, BookingAction.CONFIRM, ActorRole.ADMIN, actor_id=1)
        self.act("Staff 42", booking_id, BookingAction.REQUEST_KEY, ActorRole.STAFF, actor_id=42)
        self.act("Staff 40", booking_id, BookingAction.CANCEL, ActorRole.STAFF, actor_id=40)
        self.show_availability("B310")

    SCENARIOS = {
        "booking": scenario_booking,
        "conflict": scenario_conflict,
        "bulk": scenario_bulk,
    }

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        handler = self.SCENARIOS.get(scenario)
        if handler is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  ROOM BOOKING - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Clock: {self.clock.now():%Y-%m-%d %H:%M %Z}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

        handler(self)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Bookings stored: {self.service.store.count()}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Interactive mode
    # ------------------------------------------------------------------ #

    HELP = (
        "Commands:\n"
        "  rooms\n"
        "  slots ROOM [YYYY-MM-DD]\n"
        "  book USER ROOM HH:MM HH:MM [ROLE] [PARTICIPANT ...]\n"
        "  do ACTION BOOKING ROLE [USER] [CODE]   (BOOKING may be 'last')\n"
        "  show BOOKING\n"
        "  clock HH:MM\n"
        "  quit"
    )

    def run(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  ROOM BOOKING - Console Demo{RESET}")
        print(f"{BOLD}  Demo day: {DEMO_DAY.isoformat()}  Type 'help' or 'quit'{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        while True:
            line = input(f"\n{BLUE}> {RESET}").strip()
            if not line:
                continue
            if line.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            try:
                self.handle_command(line)
            except (ValueError, IndexError) as exc:
                print(f"{RED}  Could not parse command: {exc}{RESET}")

    def _time(self, text: str) -> datetime:
        hour, minute = (int(part) for part in text.split(":"))
        return self.at(hour, minute)

    def handle_command(self, line: str) -> None:
        parts = shlex.split(line)
        command, args = parts[0].lower(), parts[1:]

        if command == "help":
            print(self.HELP)
        elif command == "rooms":
            for room in self.service.list_rooms():
                print(f"  {room.id:6} {room.name:26} {room.capacity:4}  {room.status.value}")
        elif command == "slots":
            day = date.fromisoformat(args[1]) if len(args) > 1 else DEMO_DAY
            self.show_availability(args[0], day)
        elif command == "book":
            user_id = int(args[0])
            role = args[4] if len(args) > 4 else ActorRole.STUDENT.value
            participants = [int(p) for p in args[5:]] or None
            self.book(f"User {user_id}", user_id, args[1], self._time(args[2]),
                      self._time(args[3]), participants=participants, role=role)
        elif command == "do":
            booking_id = self.last_booking_id if args[1] == "last" else args[1]
            if booking_id is None:
                print(f"{RED}  No booking made yet.{RESET}")
                return
            actor_id = int(args[3]) if len(args) > 3 else None
            code = args[4] if len(args) > 4 else None
            self.act(args[2], booking_id, BookingAction(args[0]), ActorRole(args[2]),
                     actor_id=actor_id, access_code=code)
        elif command == "show":
            booking_id = self.last_booking_id if args[0] == "last" else args[0]
            try:
                print(self.service.get_booking(booking_id).model_dump_json(indent=2))
            except BookingError as exc:
                self.error(exc)
        elif command == "clock":
            self.clock.set(self._time(args[0]))
            self.system_log(f"Clock: {self.clock.now():%Y-%m-%d %H:%M}")
        else:
            print(self.HELP)


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline room booking demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
