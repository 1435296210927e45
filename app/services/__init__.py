"""Business logic services."""

from app.services.media_storage import MediaStorage
from app.services.training_session_service import TrainingSessionService

__all__ = [
    "MediaStorage",
    "TrainingSessionService",
]
