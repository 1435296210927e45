"""
Training session API schemas.

Attendance records are frozen: edits go through
:func:`app.training.attendance.update_record`, which returns a new record.
Photo and video entries are append-only once persisted.
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

RATING_MIN = 1
RATING_MAX = 10
DEFAULT_SCORE = 5


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class SessionType(str, Enum):
    REGULAR = "regular"
    TACTICAL = "tactical"
    PHYSICAL = "physical"
    RECOVERY = "recovery"
    MATCH_PREP = "match_prep"
    FRIENDLY = "friendly"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"
    INJURED = "injured"


class VideoSource(str, Enum):
    UPLOADED = "uploaded"
    EXTERNAL = "external"


# ----------------------------------------------------------------------
# Attendance
# ----------------------------------------------------------------------


class PerformanceScores(BaseModel):
    """Per-player evaluation, each axis 1-10."""

    model_config = ConfigDict(frozen=True)

    effort: int = Field(DEFAULT_SCORE, ge=RATING_MIN, le=RATING_MAX)
    technique: int = Field(DEFAULT_SCORE, ge=RATING_MIN, le=RATING_MAX)
    attitude: int = Field(DEFAULT_SCORE, ge=RATING_MIN, le=RATING_MAX)
    teamwork: int = Field(DEFAULT_SCORE, ge=RATING_MIN, le=RATING_MAX)


class AttendanceRecord(BaseModel):
    """Presence and evaluation of one player within a session.

    References the player by id only.  ``rating`` is kept whatever the
    status, but is only meaningful when the player was not absent; see
    :attr:`effective_rating`.
    """

    model_config = ConfigDict(frozen=True)

    player_id: int
    status: AttendanceStatus = AttendanceStatus.ABSENT
    rating: int = Field(DEFAULT_SCORE, ge=RATING_MIN, le=RATING_MAX)
    performance: PerformanceScores = Field(default_factory=PerformanceScores)
    notes: str = ""
    arrival_time: Optional[str] = Field(None, max_length=10, description="Arrival time (HH:MM) for late players")

    @property
    def effective_rating(self) -> Optional[int]:
        if self.status == AttendanceStatus.ABSENT:
            return None
        return self.rating


class AttendanceSummary(BaseModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    injured: int = 0
    percentage: int = Field(0, description="Share of present + late players, rounded")


# ----------------------------------------------------------------------
# Media
# ----------------------------------------------------------------------


class PhotoEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    caption: Optional[str] = None
    uploaded_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


class VideoEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    source_type: VideoSource = VideoSource.UPLOADED
    external_id: Optional[str] = None
    caption: Optional[str] = None
    uploaded_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


class DocumentRef(BaseModel):
    """Training plan document (PDF/DOC/DOCX)."""

    url: str
    original_name: str
    size_bytes: int = Field(..., ge=0)
    mime_type: Optional[str] = None
    uploaded_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


# ----------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------


class AttendanceUpdate(BaseModel):
    """Schema for replacing the persisted attendance list."""

    attendance: list[AttendanceRecord]


class TrainingSessionUpdate(BaseModel):
    """Partial update of notes, rating and status.

    ``status`` may not be ``completed``: completion goes through
    :class:`CompletionRequest` so attendance is committed with it.
    """

    coach_notes: Optional[str] = Field(None, max_length=5000)
    overall_rating: Optional[int] = Field(None, ge=RATING_MIN, le=RATING_MAX)
    status: Optional[SessionStatus] = None
    cancellation_reason: Optional[str] = Field(None, max_length=500)


class CompletionRequest(BaseModel):
    """Everything committed by the terminal ``complete`` transition."""

    attendance: list[AttendanceRecord]
    coach_notes: Optional[str] = Field(None, max_length=5000)
    overall_rating: Optional[int] = Field(None, ge=RATING_MIN, le=RATING_MAX)


class VideoLinkCreate(BaseModel):
    url: str = Field(..., min_length=1, max_length=500)
    caption: Optional[str] = Field(None, max_length=200)

    @field_validator("url")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


# ----------------------------------------------------------------------
# Responses
# ----------------------------------------------------------------------


class TrainingSessionResponse(BaseModel):
    """Schema for training session in API responses."""

    id: int
    team_id: int
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    location: str
    type: SessionType
    description: Optional[str] = None
    status: SessionStatus
    cancellation_reason: Optional[str] = None
    overall_rating: Optional[int] = None
    coach_notes: Optional[str] = None
    training_plan: Optional[DocumentRef] = None
    photos: list[PhotoEntry] = Field(default_factory=list)
    videos: list[VideoEntry] = Field(default_factory=list)
    attendance: list[AttendanceRecord] = Field(default_factory=list)
    attendance_summary: AttendanceSummary = Field(default_factory=AttendanceSummary)
    legal_transitions: list[SessionStatus] = Field(default_factory=list)
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
