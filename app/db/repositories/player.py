"""Player repository (read-only roster access)."""

from typing import Optional

from sqlmodel import Session, select

from app.models.team import Player, Team


class PlayerRepository:
    """Repository for roster lookups."""

    def __init__(self, session: Session):
        self.session = session

    def get_team(self, team_id: int) -> Optional[Team]:
        return self.session.get(Team, team_id)

    def get_roster(self, team_id: int) -> list[Player]:
        """Active players of *team_id*, by jersey number (unnumbered last), then id."""
        statement = (select(Player).where(Player.team_id == team_id, Player.is_active == True)  # noqa: E712
                     .order_by(Player.jersey_number.is_(None), Player.jersey_number, Player.id))
        return list(self.session.exec(statement).all())
