"""
Session edit context.

Holds all working state of one coach editing one training session: the
loaded session, the reconciled attendance list, unsaved notes/rating and
the media previews.  Nothing is module-global; open a context per
session edit::

    async with SessionEditContext(store) as ctx:
        await ctx.load(session_id)
        ctx.update_player(player_id, AttendanceField.STATUS, "present")
        await ctx.complete()

Network responses that arrive after the context moved on to another
session (or was closed) are dropped instead of applied.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from app.schemas.player import PlayerSummary
from app.schemas.training_session import (AttendanceRecord, DocumentRef, SessionStatus, TrainingSessionResponse,
                                          VideoEntry, )
from app.training import attendance as attendance_ops
from app.training.attendance import AttendanceField
from app.training.errors import ValidationError
from app.training.lifecycle import TrainingSessionLifecycle, ensure_editable, legal_transitions, validate_rating
from app.training.media import MediaPreviewManager, TempRefAllocator
from app.training.store import SelectedFile, TrainingSessionStore
from app.training.video_links import admit_external_link

logger = logging.getLogger(__name__)

PLAN_DOCUMENT_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})


class SessionEditContext:
    """Working state of one session edit, passed around explicitly."""

    def __init__(self, store: TrainingSessionStore, allocator: Optional[TempRefAllocator] = None):
        self.store = store
        self.lifecycle = TrainingSessionLifecycle(store)
        self.allocator = allocator
        self.session: Optional[TrainingSessionResponse] = None
        self.roster: list[PlayerSummary] = []
        self.attendance: list[AttendanceRecord] = []
        self.coach_notes: Optional[str] = None
        self.overall_rating: Optional[int] = None
        self.previews: Optional[MediaPreviewManager] = None
        self._session_id: Optional[int] = None
        self._generation = 0

    async def __aenter__(self) -> SessionEditContext:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> Optional[int]:
        return self._session_id

    @property
    def status(self) -> Optional[SessionStatus]:
        return self.session.status if self.session else None

    @property
    def legal_transitions(self) -> list[SessionStatus]:
        return legal_transitions(self.session.status) if self.session else []

    async def load(self, session_id: int) -> bool:
        """Switch to *session_id* and load it with its roster.

        Returns ``False`` when a newer :meth:`load` (or :meth:`close`)
        superseded this one while it was waiting; nothing is applied then.
        """
        if session_id != self._session_id:
            self._drop_working_state()
            self._session_id = session_id
            self.previews = MediaPreviewManager(self.store, session_id, allocator=self.allocator)
        self._generation += 1
        generation = self._generation

        session = await self.store.get_session(session_id)
        if not self._is_current(session_id, generation):
            logger.debug("Dropping stale load of training session %s", session_id)
            return False
        roster = await self.store.get_roster(session.team_id)
        if not self._is_current(session_id, generation):
            logger.debug("Dropping stale roster for training session %s", session_id)
            return False

        self.session = session
        self.roster = list(roster)
        self.attendance = attendance_ops.reconcile(self.roster, session.attendance)
        self.coach_notes = session.coach_notes
        self.overall_rating = session.overall_rating
        return True

    def roster_changed(self, roster: Sequence[PlayerSummary]) -> list[AttendanceRecord]:
        """Re-reconcile against a new roster, keeping unsaved edits."""
        self.roster = list(roster)
        self.attendance = attendance_ops.reconcile(self.roster, self.attendance)
        return self.attendance

    # ------------------------------------------------------------------
    # Local edits
    # ------------------------------------------------------------------

    def update_player(self, player_id: int, field: AttendanceField, value: Any) -> AttendanceRecord:
        self._require_editable()
        self.attendance = attendance_ops.update_attendance(self.attendance, player_id, field, value)
        return self.record_for(player_id)

    def toggle_player(self, player_id: int) -> AttendanceRecord:
        self._require_editable()
        record = self.record_for(player_id)
        toggled = attendance_ops.toggle_presence(record)
        self.attendance = [toggled if r.player_id == player_id else r for r in self.attendance]
        return toggled

    def record_for(self, player_id: int) -> AttendanceRecord:
        for record in self.attendance:
            if record.player_id == player_id:
                return record
        raise ValidationError(f"Player {player_id} is not on the roster")

    def set_coach_notes(self, notes: Optional[str]) -> None:
        """``None`` clears the notes; they are saved as an empty string."""
        self._require_editable()
        self.coach_notes = notes or ""

    def set_overall_rating(self, rating: Optional[int]) -> None:
        self._require_editable()
        validate_rating(rating)
        self.overall_rating = rating

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def save_attendance(self) -> TrainingSessionResponse:
        """Persist the working attendance as a draft."""
        session = self._require_session()
        updated = await self.lifecycle.save_attendance(session, self.attendance)
        return self._apply(session.id, updated)

    async def save_details(self) -> TrainingSessionResponse:
        session = self._require_session()
        updated = await self.lifecycle.update_details(session, self.coach_notes, self.overall_rating)
        return self._apply(session.id, updated)

    async def transition(self, target: SessionStatus,
                         cancellation_reason: Optional[str] = None) -> TrainingSessionResponse:
        session = self._require_session()
        updated = await self.lifecycle.transition(session, target, cancellation_reason)
        return self._apply(session.id, updated)

    async def complete(self) -> TrainingSessionResponse:
        """Complete the session with the working attendance, notes and rating.

        On failure the working state is kept, so calling again retries.
        """
        session = self._require_session()
        attendance_ops.check_complete((p.id for p in self.roster), self.attendance)
        updated = await self.lifecycle.complete_session(session.id, self.attendance, self.coach_notes,
                                                        self.overall_rating)
        return self._apply(session.id, updated)

    async def admit_video_link(self, raw_url: str, caption: Optional[str] = None) -> VideoEntry:
        session = self._require_session()
        entry = await admit_external_link(self.store, session.id, raw_url, caption)
        if session.id == self._session_id and self.session is not None:
            self.session = self.session.model_copy(update={"videos": [*self.session.videos, entry]})
        return entry

    async def upload_plan(self, file: SelectedFile) -> DocumentRef:
        session = self._require_session()
        if file.content_type not in PLAN_DOCUMENT_TYPES:
            raise ValidationError("Training plans must be PDF or Word documents")
        document = await self.store.upload_plan_document(session.id, file)
        if session.id == self._session_id and self.session is not None:
            self.session = self.session.model_copy(update={"training_plan": document})
        return document

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._drop_working_state()
        self._session_id = None
        self._generation += 1

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _drop_working_state(self) -> None:
        if self.previews is not None:
            self.previews.close()
        self.previews = None
        self.session = None
        self.roster = []
        self.attendance = []
        self.coach_notes = None
        self.overall_rating = None

    def _is_current(self, session_id: int, generation: int) -> bool:
        return session_id == self._session_id and generation == self._generation

    def _require_session(self) -> TrainingSessionResponse:
        if self.session is None:
            raise ValidationError("No training session is loaded")
        return self.session

    def _require_editable(self) -> None:
        ensure_editable(self._require_session().status)

    def _apply(self, session_id: int, updated: TrainingSessionResponse) -> TrainingSessionResponse:
        """Adopt *updated* unless the context moved on meanwhile."""
        if session_id != self._session_id:
            logger.debug("Ignoring late response for training session %s", session_id)
            return updated
        self.session = updated
        return updated
