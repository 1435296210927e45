"""
Training session error taxonomy.

All errors are recoverable at the caller: none of the operations that
raise them leaves working or persisted state modified.
"""

from typing import Optional


class TrainingSessionError(Exception):
    """Base class.  ``code`` is stable and travels over the HTTP API."""

    code = "training_session_error"

    def __init__(self, message: str, *, session_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.session_id = session_id

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(TrainingSessionError):
    """User-correctable input problem (rating range, file type, ...)."""

    code = "validation_error"


class InvalidVideoLink(ValidationError):
    code = "invalid_video_link"


class InvalidTransition(TrainingSessionError):
    code = "invalid_transition"


class SessionTerminal(TrainingSessionError):
    """The session is completed or cancelled and no longer editable."""

    code = "session_terminal"


class SessionNotFound(TrainingSessionError):
    code = "session_not_found"


class NetworkError(TrainingSessionError):
    """The collaborator could not be reached or answered with a server error."""

    code = "network_error"


class UploadFailed(NetworkError):
    code = "upload_failed"


ERRORS_BY_CODE: dict[str, type[TrainingSessionError]] = {
    cls.code: cls
    for cls in (ValidationError, InvalidVideoLink, InvalidTransition, SessionTerminal, SessionNotFound, NetworkError,
                UploadFailed)
}
