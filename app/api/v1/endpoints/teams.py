"""
Team roster endpoint.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db.session import get_db
from app.schemas.player import PlayerSummary
from app.services.training_session_service import TrainingSessionService

router = APIRouter()


@router.get("/{team_id}/roster", summary="Active players of a team.", response_model=list[PlayerSummary], )
def get_roster(team_id: int, db: Session = Depends(get_db)):
    service = TrainingSessionService(db)
    return service.get_roster(team_id)
