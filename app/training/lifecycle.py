"""
Training session lifecycle.

Edges (anything else is an :class:`InvalidTransition`)::

    scheduled   -> in_progress | postponed | cancelled | completed
    in_progress -> cancelled | completed
    postponed   -> scheduled

``completed`` and ``cancelled`` are terminal.  ``completed`` is only
reachable through :meth:`TrainingSessionLifecycle.complete_session`,
which commits attendance, notes, rating and status together.

Completion contract
-------------------

The backend applies a completion as one database transaction.  It is
re-entrant: re-submitting the same payload to a session that is already
completed returns the stored session without writing, so a caller that
lost the response can simply call again.  A different payload on a
completed session raises :class:`SessionTerminal`.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from app.schemas.training_session import (RATING_MAX, RATING_MIN, AttendanceRecord, CompletionRequest, SessionStatus,
                                          TrainingSessionResponse, TrainingSessionUpdate, )
from app.training.errors import InvalidTransition, SessionTerminal, ValidationError
from app.training.store import TrainingSessionStore

logger = logging.getLogger(__name__)

TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.SCHEDULED: frozenset({SessionStatus.IN_PROGRESS, SessionStatus.POSTPONED, SessionStatus.CANCELLED,
                                        SessionStatus.COMPLETED, }),
    SessionStatus.IN_PROGRESS: frozenset({SessionStatus.CANCELLED, SessionStatus.COMPLETED}),
    SessionStatus.POSTPONED: frozenset({SessionStatus.SCHEDULED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
}

TERMINAL_STATES = frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED})

# Stable ordering for anything rendered to the user
_ORDER = list(SessionStatus)


def legal_transitions(status: SessionStatus) -> list[SessionStatus]:
    """Statuses reachable from *status*, in declaration order."""
    targets = TRANSITIONS[SessionStatus(status)]
    return [s for s in _ORDER if s in targets]


def is_terminal(status: SessionStatus) -> bool:
    return SessionStatus(status) in TERMINAL_STATES


def check_transition(current: SessionStatus, target: SessionStatus) -> None:
    current, target = SessionStatus(current), SessionStatus(target)
    if target not in TRANSITIONS[current]:
        raise InvalidTransition(f"Cannot move a training session from '{current.value}' to '{target.value}'")


def ensure_editable(status: SessionStatus) -> None:
    """Attendance, notes and rating are frozen once a session is terminal."""
    status = SessionStatus(status)
    if status in TERMINAL_STATES:
        raise SessionTerminal(f"Training session is {status.value} and can no longer be edited")


def validate_rating(rating: Optional[int]) -> None:
    if rating is None:
        return
    if isinstance(rating, bool) or not isinstance(rating, int) or not RATING_MIN <= rating <= RATING_MAX:
        raise ValidationError(f"Overall rating must be an integer between {RATING_MIN} and {RATING_MAX}")


def check_unique_players(attendance: Sequence[AttendanceRecord]) -> None:
    seen: set[int] = set()
    for record in attendance:
        if record.player_id in seen:
            raise ValidationError(f"Duplicate attendance record for player {record.player_id}")
        seen.add(record.player_id)


def completion_matches(session: TrainingSessionResponse, request: CompletionRequest) -> bool:
    """Whether a completed *session* already holds exactly *request*."""
    return (session.status == SessionStatus.COMPLETED and list(session.attendance) == list(request.attendance)
            and session.coach_notes == request.coach_notes and session.overall_rating == request.overall_rating)


class TrainingSessionLifecycle:
    """Validated status changes and edits, persisted through a store.

    Every check runs before the store is called, so a rejected request
    never reaches the network.
    """

    def __init__(self, store: TrainingSessionStore):
        self.store = store

    async def transition(self, session: TrainingSessionResponse, target: SessionStatus,
                         cancellation_reason: Optional[str] = None, ) -> TrainingSessionResponse:
        target = SessionStatus(target)
        if target == SessionStatus.COMPLETED:
            raise InvalidTransition("Use complete_session to complete a training session", session_id=session.id)
        check_transition(session.status, target)
        if cancellation_reason is not None and target != SessionStatus.CANCELLED:
            raise ValidationError("A cancellation reason is only accepted when cancelling")

        patch = TrainingSessionUpdate(status=target, cancellation_reason=cancellation_reason)
        updated = await self.store.update_session(session.id, patch)
        logger.info("Training session %s: %s -> %s", session.id, session.status.value, target.value)
        return updated

    async def save_attendance(self, session: TrainingSessionResponse,
                              attendance: Sequence[AttendanceRecord]) -> TrainingSessionResponse:
        ensure_editable(session.status)
        check_unique_players(attendance)
        return await self.store.update_attendance(session.id, list(attendance))

    async def update_details(self, session: TrainingSessionResponse, coach_notes: Optional[str] = None,
                             overall_rating: Optional[int] = None, ) -> TrainingSessionResponse:
        ensure_editable(session.status)
        validate_rating(overall_rating)
        patch = TrainingSessionUpdate(coach_notes=coach_notes, overall_rating=overall_rating)
        return await self.store.update_session(session.id, patch)

    async def complete_session(self, session_id: int, attendance: Sequence[AttendanceRecord],
                               coach_notes: Optional[str] = None,
                               overall_rating: Optional[int] = None, ) -> TrainingSessionResponse:
        """Commit attendance, notes, rating and ``status=completed`` as one unit.

        *attendance* must be a full reconciliation of the current roster;
        the backend verifies it against the roster it holds.  Safe to call
        again with the same arguments after a :class:`NetworkError`.
        """
        validate_rating(overall_rating)
        check_unique_players(attendance)

        request = CompletionRequest(attendance=list(attendance), coach_notes=coach_notes,
                                    overall_rating=overall_rating)
        completed = await self.store.complete_session(session_id, request)
        logger.info("Training session %s completed (%d attendance records)", session_id, len(request.attendance))
        return completed
