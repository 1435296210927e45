"""
Player schemas.

Only the roster view is exposed: player management itself lives
elsewhere.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class PlayerSummary(BaseModel):
    """A player as seen on a team roster."""

    id: int
    first_name: str
    last_name: str
    jersey_number: Optional[int] = None
    position: Optional[str] = None
    photo_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
