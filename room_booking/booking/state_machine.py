"""
Finite state machine for booking status transitions.

Defines every legal move of a booking through its lifecycle, which actor
roles may trigger it, and any extra guard (time checks, access code). The
machine itself is stateless: the booking carries its status, and ``apply``
returns an updated copy without touching the original.

    pending -> approved | confirmed | rejected
    approved, confirmed -> key_requested -> key_issued -> completed | overdue
    any non-terminal -> cancelled (admin); pending/approved/confirmed -> cancelled (creator)

Usage:
    machine = BookingStateMachine()
    ctx = TransitionContext(actor_role=ActorRole.ADMIN, now=clock.now())
    approved = machine.apply(booking, BookingAction.APPROVE, ctx)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from room_booking.errors import (
    InvalidAccessCodeError,
    InvalidTransitionError,
    NotPermittedError,
)
from room_booking.schemas.booking_schema import (
    ACCESS_CODE_STATUSES,
    TERMINAL_STATUSES,
    Booking,
    BookingStatus,
    StatusChange,
)
from room_booking.utils import generate_access_code

logger = logging.getLogger(__name__)


class BookingAction(str, Enum):
    """Events that cause status transitions."""
    APPROVE = "approve"
    CONFIRM = "confirm"
    REJECT = "reject"
    CANCEL = "cancel"
    REQUEST_KEY = "request_key"
    ISSUE_KEY = "issue_key"
    COMPLETE = "complete"
    MARK_OVERDUE = "mark_overdue"


class ActorRole(str, Enum):
    STUDENT = "student"
    STAFF = "staff"
    ADMIN = "admin"
    GUARD = "guard"
    SYSTEM = "system"


class Relation(str, Enum):
    """Identity the actor must have relative to the booking."""
    ANY = "any"
    CREATOR = "creator"
    MEMBER = "member"


@dataclass(frozen=True)
class TransitionContext:
    """Who is acting, and when."""
    actor_role: ActorRole
    now: datetime
    actor_id: Optional[int] = None
    access_code: Optional[str] = None
    overdue_grace: timedelta = timedelta(0)


Guard = Callable[[Booking, TransitionContext], None]


def _before_start(booking: Booking, ctx: TransitionContext) -> None:
    if ctx.now >= booking.start_time:
        raise InvalidTransitionError(
            f"Booking {booking.id} can no longer be cancelled: it started at "
            f"{booking.start_time.isoformat()}."
        )


def _code_matches(booking: Booking, ctx: TransitionContext) -> None:
    if not booking.secret_code or ctx.access_code != booking.secret_code:
        raise InvalidAccessCodeError(f"Access code does not match booking {booking.id}.")


def _after_end(booking: Booking, ctx: TransitionContext) -> None:
    if ctx.now < booking.end_time:
        raise InvalidTransitionError(
            f"Booking {booking.id} cannot be completed before it ends at "
            f"{booking.end_time.isoformat()}."
        )


def _past_grace(booking: Booking, ctx: TransitionContext) -> None:
    if ctx.now <= booking.end_time + ctx.overdue_grace:
        raise InvalidTransitionError(
            f"Booking {booking.id} is not overdue yet."
        )


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_state: BookingStatus
    to_state: BookingStatus
    action: BookingAction
    actors: frozenset[ActorRole]
    relation: Relation = Relation.ANY
    guard: Optional[Guard] = None


_MEMBERS = frozenset({ActorRole.STUDENT, ActorRole.STAFF})
_REVIEWERS = frozenset({ActorRole.GUARD, ActorRole.ADMIN})
_ADMIN = frozenset({ActorRole.ADMIN})
_GUARD = frozenset({ActorRole.GUARD})
_SYSTEM = frozenset({ActorRole.SYSTEM})


class BookingStateMachine:
    """
    Deterministic transition table for booking status.

    Every transition must be explicitly defined. Nothing leaves a terminal
    state, and nothing moves backward.
    """

    TRANSITIONS: list[Transition] = [
        # --- Review ---
        Transition(BookingStatus.PENDING, BookingStatus.APPROVED,
                   BookingAction.APPROVE, _REVIEWERS),
        Transition(BookingStatus.PENDING, BookingStatus.CONFIRMED,
                   BookingAction.CONFIRM, _ADMIN),
        Transition(BookingStatus.PENDING, BookingStatus.REJECTED,
                   BookingAction.REJECT, _REVIEWERS),

        # --- Creator cancellation ---
        Transition(BookingStatus.PENDING, BookingStatus.CANCELLED,
                   BookingAction.CANCEL, _MEMBERS, Relation.CREATOR, _before_start),
        Transition(BookingStatus.APPROVED, BookingStatus.CANCELLED,
                   BookingAction.CANCEL, _MEMBERS, Relation.CREATOR, _before_start),
        Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED,
                   BookingAction.CANCEL, _MEMBERS, Relation.CREATOR, _before_start),

        # --- Key handoff ---
        Transition(BookingStatus.APPROVED, BookingStatus.KEY_REQUESTED,
                   BookingAction.REQUEST_KEY, _MEMBERS, Relation.MEMBER),
        Transition(BookingStatus.CONFIRMED, BookingStatus.KEY_REQUESTED,
                   BookingAction.REQUEST_KEY, _MEMBERS, Relation.MEMBER),
        Transition(BookingStatus.KEY_REQUESTED, BookingStatus.KEY_ISSUED,
                   BookingAction.ISSUE_KEY, _GUARD, guard=_code_matches),
        Transition(BookingStatus.KEY_ISSUED, BookingStatus.COMPLETED,
                   BookingAction.COMPLETE, _GUARD, guard=_after_end),
        Transition(BookingStatus.KEY_ISSUED, BookingStatus.OVERDUE,
                   BookingAction.MARK_OVERDUE, _SYSTEM, guard=_past_grace),

        # --- Admin override ---
        *[
            Transition(state, BookingStatus.CANCELLED, BookingAction.CANCEL, _ADMIN)
            for state in (
                BookingStatus.PENDING,
                BookingStatus.APPROVED,
                BookingStatus.CONFIRMED,
                BookingStatus.KEY_REQUESTED,
                BookingStatus.KEY_ISSUED,
            )
        ],
    ]

    def get_valid_actions(self, status: BookingStatus) -> list[BookingAction]:
        """Return the distinct actions defined from ``status``, in table order."""
        actions: list[BookingAction] = []
        for t in self.TRANSITIONS:
            if t.from_state == status and t.action not in actions:
                actions.append(t.action)
        return actions

    def is_terminal(self, status: BookingStatus) -> bool:
        return status in TERMINAL_STATUSES

    def apply(self, booking: Booking, action: BookingAction, ctx: TransitionContext) -> Booking:
        """
        Execute a status transition on a copy of ``booking``.

        Raises:
            InvalidTransitionError: terminal state, no such transition, or a
                time guard failed.
            NotPermittedError: the actor's role or identity is not allowed.
            InvalidAccessCodeError: key issuance with the wrong code.
        """
        current = booking.status
        if self.is_terminal(current):
            raise InvalidTransitionError(
                f"Booking {booking.id} is {current.value}; "
                "no transitions are defined out of a terminal state."
            )

        candidates = [
            t for t in self.TRANSITIONS if t.from_state == current and t.action == action
        ]
        if not candidates:
            valid = [a.value for a in self.get_valid_actions(current)]
            raise InvalidTransitionError(
                f"No valid transition from '{current.value}' with action "
                f"'{action.value}'. Valid actions: {valid}"
            )

        transition = self._select(booking, candidates, ctx)
        if transition.guard is not None:
            transition.guard(booking, ctx)

        return self._commit(booking, transition, ctx)

    def _select(
        self, booking: Booking, candidates: list[Transition], ctx: TransitionContext
    ) -> Transition:
        by_role = [t for t in candidates if ctx.actor_role in t.actors]
        if not by_role:
            raise NotPermittedError(
                f"Role '{ctx.actor_role.value}' may not {candidates[0].action.value} "
                f"a {booking.status.value} booking."
            )
        for t in by_role:
            if t.relation == Relation.ANY:
                return t
            if t.relation == Relation.CREATOR and ctx.actor_id == booking.creator_id:
                return t
            if (
                t.relation == Relation.MEMBER
                and ctx.actor_id is not None
                and booking.involves(ctx.actor_id)
            ):
                return t
        raise NotPermittedError(
            f"User {ctx.actor_id} is not allowed to {by_role[0].action.value} "
            f"booking {booking.id}."
        )

    def _commit(self, booking: Booking, t: Transition, ctx: TransitionContext) -> Booking:
        update: dict = {
            "status": t.to_state,
            "updated_at": ctx.now,
            "history": [
                *booking.history,
                StatusChange(
                    from_status=t.from_state,
                    to_status=t.to_state,
                    action=t.action.value,
                    actor_role=ctx.actor_role.value,
                    actor_id=ctx.actor_id,
                    at=ctx.now,
                ),
            ],
        }
        if t.to_state in ACCESS_CODE_STATUSES and not booking.secret_code:
            update["secret_code"] = generate_access_code()
        if t.to_state == BookingStatus.KEY_ISSUED:
            update["key_issued_at"] = ctx.now
        if t.to_state == BookingStatus.COMPLETED:
            update["key_returned_at"] = ctx.now

        logger.info(
            "Booking %s: %s -> %s (action: %s, actor: %s)",
            booking.id, t.from_state.value, t.to_state.value,
            t.action.value, ctx.actor_role.value,
        )
        return booking.model_copy(update=update)
