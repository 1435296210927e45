"""
Training session database model.

Attendance, photos, videos and the training plan are stored as JSON
documents on the session row; they are validated through the pydantic
schemas at the service layer and always reassigned as a whole (never
mutated in place) so changes are picked up on commit.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class TrainingSession(SQLModel, table=True):
    """A scheduled team training session.

    Created by the scheduling flow in status ``scheduled``; this service
    reads it, edits it and moves it through its lifecycle.
    """

    __tablename__ = "training_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="teams.id", nullable=False, index=True)
    date: datetime.date = Field(nullable=False, index=True)
    start_time: datetime.time = Field(nullable=False)
    end_time: datetime.time = Field(nullable=False)
    location: str = Field(default="Main Training Ground", max_length=200)
    type: str = Field(default="regular", max_length=20)
    description: Optional[str] = Field(default=None, max_length=2000)

    # Lifecycle
    status: str = Field(default="scheduled", max_length=20, index=True)
    cancellation_reason: Optional[str] = Field(default=None, max_length=500)

    # Coach evaluation (independent of per-player ratings)
    overall_rating: Optional[int] = Field(default=None, ge=1, le=10)
    coach_notes: Optional[str] = Field(default=None, max_length=5000)

    # Documents
    attendance: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    photos: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    videos: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    training_plan: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
