"""
Team and player database models.

Both are owned by the team management screens; this service only reads
them to build the roster of a training session.
"""

import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class Team(SQLModel, table=True):
    __tablename__ = "teams"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=100)
    age_category: Optional[str] = Field(default=None, max_length=20)

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


class Player(SQLModel, table=True):
    """A player assigned to a team.  Inactive players are not on the roster."""

    __tablename__ = "players"

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="teams.id", nullable=False, index=True)
    first_name: str = Field(nullable=False, max_length=50)
    last_name: str = Field(nullable=False, max_length=50)
    jersey_number: Optional[int] = Field(default=None, ge=1, le=99)
    position: Optional[str] = Field(default=None, max_length=3)
    photo_url: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True, nullable=False)

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
