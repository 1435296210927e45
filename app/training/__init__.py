"""Training session core: attendance reconciliation, lifecycle, media previews, video links."""

from app.training.attendance import AttendanceField, reconcile, update_record
from app.training.editor import SessionEditContext
from app.training.lifecycle import TrainingSessionLifecycle, legal_transitions
from app.training.media import MediaPreviewManager, TempFileAllocator
from app.training.store import HttpTrainingSessionStore, SelectedFile, TrainingSessionStore
from app.training.video_links import admit_external_link, extract_video_id

__all__ = [
    "AttendanceField",
    "reconcile",
    "update_record",
    "SessionEditContext",
    "TrainingSessionLifecycle",
    "legal_transitions",
    "MediaPreviewManager",
    "TempFileAllocator",
    "HttpTrainingSessionStore",
    "SelectedFile",
    "TrainingSessionStore",
    "admit_external_link",
    "extract_video_id",
]
