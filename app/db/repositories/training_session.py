"""
Training session repository.

Handles database operations for :class:`TrainingSession`.  Every
mutation is a single commit, so an update that touches several
columns is applied atomically.
"""

import datetime
from typing import Optional

from sqlmodel import Session, select

from app.models.training_session import TrainingSession


class TrainingSessionRepository:
    """Repository for TrainingSession database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, entry: TrainingSession) -> TrainingSession:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def get_by_id(self, entry_id: int) -> Optional[TrainingSession]:
        return self.session.get(TrainingSession, entry_id)

    def list_by_team(self, team_id: int, status: Optional[str] = None, start: Optional[datetime.date] = None,
                     end: Optional[datetime.date] = None, ) -> list[TrainingSession]:
        statement = select(TrainingSession).where(TrainingSession.team_id == team_id)
        if status is not None:
            statement = statement.where(TrainingSession.status == status)
        if start is not None:
            statement = statement.where(TrainingSession.date >= start)
        if end is not None:
            statement = statement.where(TrainingSession.date <= end)
        statement = statement.order_by(TrainingSession.date.desc(), TrainingSession.start_time.desc())
        return list(self.session.exec(statement).all())

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update(self, entry: TrainingSession) -> TrainingSession:
        self.session.add(entry)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(entry)
        return entry
