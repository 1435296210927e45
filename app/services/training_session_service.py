"""
Training session service.

Applies the lifecycle rules of :mod:`app.training` to the persisted
sessions: status changes follow the edge table, terminal sessions reject
attendance/notes/rating edits, and completion commits attendance, notes,
rating and status in one transaction after checking the attendance
against the current roster.

Core errors are translated to :class:`HTTPException` here, with a
``{"code", "message"}`` detail the HTTP store maps back.
"""

import contextlib
import datetime
import logging
from typing import Iterator, Optional

from fastapi import HTTPException, UploadFile, status
from sqlmodel import Session

from app.core.config import settings
from app.db.repositories.player import PlayerRepository
from app.db.repositories.training_session import TrainingSessionRepository
from app.models.training_session import TrainingSession
from app.schemas.player import PlayerSummary
from app.schemas.training_session import (AttendanceRecord, AttendanceUpdate, CompletionRequest, DocumentRef,
                                          PhotoEntry, SessionStatus, TrainingSessionResponse, TrainingSessionUpdate,
                                          VideoEntry, VideoLinkCreate, VideoSource, )
from app.services.media_storage import FileTooLarge, MediaStorage, StoredFile
from app.training.attendance import attendance_summary, check_complete
from app.training.editor import PLAN_DOCUMENT_TYPES
from app.training.errors import (InvalidTransition, SessionNotFound, SessionTerminal, TrainingSessionError,
                                 ValidationError, )
from app.training.lifecycle import (check_transition, check_unique_players, completion_matches, ensure_editable,
                                    legal_transitions, )
from app.training.video_links import build_external_entry

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type, int] = {
    FileTooLarge: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    SessionNotFound: status.HTTP_404_NOT_FOUND,
    InvalidTransition: status.HTTP_409_CONFLICT,
    SessionTerminal: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def http_error(exc: TrainingSessionError) -> HTTPException:
    for cls in type(exc).__mro__:
        if cls in _STATUS_CODES:
            return HTTPException(status_code=_STATUS_CODES[cls], detail=exc.to_detail())
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.to_detail())


@contextlib.contextmanager
def translate_errors(entry_id: Optional[int] = None) -> Iterator[None]:
    try:
        yield
    except TrainingSessionError as e:
        logger.warning("Training session %s: rejected (%s): %s", entry_id, e.code, e.message)
        raise http_error(e) from e


class TrainingSessionService:
    """Service for training session business logic."""

    def __init__(self, session: Session, storage: Optional[MediaStorage] = None):
        self.repository = TrainingSessionRepository(session)
        self.players = PlayerRepository(session)
        self.storage = storage or MediaStorage()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, entry_id: int) -> TrainingSessionResponse:
        return self._to_response(self._get_entry(entry_id))

    def list_for_team(self, team_id: int, session_status: Optional[SessionStatus] = None,
                      start: Optional[datetime.date] = None,
                      end: Optional[datetime.date] = None, ) -> list[TrainingSessionResponse]:
        status_value = session_status.value if session_status else None
        entries = self.repository.list_by_team(team_id, status_value, start, end)
        return [self._to_response(e) for e in entries]

    def get_roster(self, team_id: int) -> list[PlayerSummary]:
        if self.players.get_team(team_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
        return [PlayerSummary.model_validate(p) for p in self.players.get_roster(team_id)]

    # ------------------------------------------------------------------
    # Edits and lifecycle
    # ------------------------------------------------------------------

    def update_attendance(self, entry_id: int, data: AttendanceUpdate) -> TrainingSessionResponse:
        entry = self._get_entry(entry_id)
        with translate_errors(entry_id):
            ensure_editable(entry.status)
            check_unique_players(data.attendance)

        entry.attendance = [r.model_dump(mode="json") for r in data.attendance]
        entry.updated_at = datetime.datetime.utcnow()
        entry = self.repository.update(entry)
        return self._to_response(entry)

    def update_session(self, entry_id: int, data: TrainingSessionUpdate) -> TrainingSessionResponse:
        entry = self._get_entry(entry_id)
        current = SessionStatus(entry.status)

        with translate_errors(entry_id):
            if data.coach_notes is not None or data.overall_rating is not None:
                ensure_editable(current)
            if data.status is not None:
                if data.status == SessionStatus.COMPLETED:
                    raise InvalidTransition("Sessions are completed through the completion endpoint")
                check_transition(current, data.status)
            if data.cancellation_reason is not None and data.status != SessionStatus.CANCELLED:
                raise ValidationError("A cancellation reason is only accepted when cancelling")

        if data.coach_notes is not None:
            entry.coach_notes = data.coach_notes
        if data.overall_rating is not None:
            entry.overall_rating = data.overall_rating
        if data.status is not None:
            entry.status = data.status.value
            if data.status == SessionStatus.CANCELLED:
                entry.cancellation_reason = data.cancellation_reason

        entry.updated_at = datetime.datetime.utcnow()
        entry = self.repository.update(entry)
        if entry.status != current.value:
            logger.info("Training session %s: %s -> %s", entry_id, current.value, entry.status)
        return self._to_response(entry)

    def complete(self, entry_id: int, data: CompletionRequest) -> TrainingSessionResponse:
        """Persist attendance, notes, rating and ``completed`` in one commit.

        Re-submitting the stored payload to a completed session is a no-op
        that returns the session.
        """
        entry = self._get_entry(entry_id)
        response = self._to_response(entry)
        if completion_matches(response, data):
            logger.info("Training session %s: completion replayed, nothing to write", entry_id)
            return response

        with translate_errors(entry_id):
            ensure_editable(entry.status)
            check_transition(entry.status, SessionStatus.COMPLETED)
            roster_ids = [p.id for p in self.players.get_roster(entry.team_id)]
            check_complete(roster_ids, data.attendance)

        entry.attendance = [r.model_dump(mode="json") for r in data.attendance]
        entry.coach_notes = data.coach_notes
        entry.overall_rating = data.overall_rating
        entry.status = SessionStatus.COMPLETED.value
        entry.updated_at = datetime.datetime.utcnow()
        entry = self.repository.update(entry)
        logger.info("Training session %s completed with %d attendance records", entry_id, len(data.attendance))
        return self._to_response(entry)

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    def upload_photos(self, entry_id: int, files: list[UploadFile]) -> list[PhotoEntry]:
        entry = self._get_entry(entry_id)
        if not files:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please upload files")
        if len(files) > settings.MAX_PHOTOS_PER_UPLOAD:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Too many files.")
        with translate_errors(entry_id):
            for upload in files:
                self._check_type(upload, "image/", "an image")
            stored = self._store_all("photos", files, "photos")

        photos = [PhotoEntry(url=s.url, caption="", uploaded_at=datetime.datetime.utcnow()) for s in stored]
        self._append(entry, stored, photos=[*entry.photos, *(p.model_dump(mode="json") for p in photos)])
        logger.info("Training session %s: %d photos uploaded", entry_id, len(photos))
        return photos

    def upload_video(self, entry_id: int, upload: UploadFile, caption: Optional[str] = None) -> VideoEntry:
        entry = self._get_entry(entry_id)
        with translate_errors(entry_id):
            self._check_type(upload, "video/", "a video")
            stored = self._store_all("videos", [upload], "video")

        video = VideoEntry(url=stored[0].url, source_type=VideoSource.UPLOADED, caption=caption or "",
                           uploaded_at=datetime.datetime.utcnow())
        self._append(entry, stored, videos=[*entry.videos, video.model_dump(mode="json")])
        logger.info("Training session %s: video uploaded", entry_id)
        return video

    def upload_plan(self, entry_id: int, upload: UploadFile) -> DocumentRef:
        entry = self._get_entry(entry_id)
        with translate_errors(entry_id):
            if upload.content_type not in PLAN_DOCUMENT_TYPES:
                raise ValidationError("Training plans must be PDF or Word documents")
            stored = self._store_all("documents", [upload], "document")

        document = DocumentRef(url=stored[0].url, original_name=stored[0].original_name,
                               size_bytes=stored[0].size_bytes, mime_type=stored[0].content_type,
                               uploaded_at=datetime.datetime.utcnow())
        self._append(entry, stored, training_plan=document.model_dump(mode="json"))
        logger.info("Training session %s: training plan %s uploaded", entry_id, document.original_name)
        return document

    def add_video_link(self, entry_id: int, data: VideoLinkCreate) -> VideoEntry:
        entry = self._get_entry(entry_id)
        with translate_errors(entry_id):
            video = build_external_entry(data.url, data.caption)

        entry.videos = [*entry.videos, video.model_dump(mode="json")]
        entry.updated_at = datetime.datetime.utcnow()
        self.repository.update(entry)
        logger.info("Training session %s: external video %s linked", entry_id, video.external_id)
        return video

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_entry(self, entry_id: int) -> TrainingSession:
        entry = self.repository.get_by_id(entry_id)
        if not entry:
            raise http_error(SessionNotFound("Training session not found", session_id=entry_id))
        return entry

    @staticmethod
    def _check_type(upload: UploadFile, prefix: str, label: str) -> None:
        content_type = upload.content_type or ""
        if not content_type.startswith(prefix):
            raise ValidationError(f"Invalid file type for '{upload.filename}': expected {label}")

    def _store_all(self, kind: str, files: list[UploadFile], field: str) -> list[StoredFile]:
        stored: list[StoredFile] = []
        try:
            for upload in files:
                stored.append(self.storage.save(kind, upload, field))
        except Exception:
            for s in stored:
                self.storage.delete(s)
            raise
        return stored

    def _append(self, entry: TrainingSession, stored: list[StoredFile], **columns) -> TrainingSession:
        """Assign new media columns and commit; written files are removed if the commit fails."""
        for name, value in columns.items():
            setattr(entry, name, value)
        entry.updated_at = datetime.datetime.utcnow()
        try:
            return self.repository.update(entry)
        except Exception:
            for s in stored:
                self.storage.delete(s)
            raise

    @staticmethod
    def _to_response(entry: TrainingSession) -> TrainingSessionResponse:
        records = [AttendanceRecord.model_validate(r) for r in entry.attendance or []]
        current = SessionStatus(entry.status)
        return TrainingSessionResponse(id=entry.id, team_id=entry.team_id, date=entry.date,
                                       start_time=entry.start_time, end_time=entry.end_time,
                                       location=entry.location, type=entry.type, description=entry.description,
                                       status=current, cancellation_reason=entry.cancellation_reason,
                                       overall_rating=entry.overall_rating, coach_notes=entry.coach_notes,
                                       training_plan=entry.training_plan,
                                       photos=[PhotoEntry.model_validate(p) for p in entry.photos or []],
                                       videos=[VideoEntry.model_validate(v) for v in entry.videos or []],
                                       attendance=records, attendance_summary=attendance_summary(records),
                                       legal_transitions=legal_transitions(current), created_at=entry.created_at,
                                       updated_at=entry.updated_at, )
