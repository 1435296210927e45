"""Pydantic schemas for request/response validation."""

from app.schemas.player import PlayerSummary
from app.schemas.training_session import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceSummary,
    AttendanceUpdate,
    CompletionRequest,
    DocumentRef,
    PerformanceScores,
    PhotoEntry,
    SessionStatus,
    SessionType,
    TrainingSessionResponse,
    TrainingSessionUpdate,
    VideoEntry,
    VideoLinkCreate,
    VideoSource,
)

__all__ = [
    "PlayerSummary",
    "AttendanceRecord",
    "AttendanceStatus",
    "AttendanceSummary",
    "AttendanceUpdate",
    "CompletionRequest",
    "DocumentRef",
    "PerformanceScores",
    "PhotoEntry",
    "SessionStatus",
    "SessionType",
    "TrainingSessionResponse",
    "TrainingSessionUpdate",
    "VideoEntry",
    "VideoLinkCreate",
    "VideoSource",
]
