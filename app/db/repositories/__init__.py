"""Database repositories."""

from app.db.repositories.player import PlayerRepository
from app.db.repositories.training_session import TrainingSessionRepository

__all__ = [
    "PlayerRepository",
    "TrainingSessionRepository",
]
