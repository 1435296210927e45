"""SQLModel database models."""

from app.models.team import Player, Team
from app.models.training_session import TrainingSession

__all__ = [
    "Team",
    "Player",
    "TrainingSession",
]
