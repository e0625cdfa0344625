import logging
from datetime import date, time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from fixture_scheduler.database import get_session
from fixture_scheduler.models import Match
from fixture_scheduler.services.fixture_diagnostics import diagnose_fixtures
from fixture_scheduler.services.fixture_scheduler import (
    FixtureInvariantError,
    TournamentNotFoundError,
    generate_fixtures,
    get_tournament_or_raise,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class GenerateFixturesRequest(BaseModel):
    reset: bool = False


class MatchResponse(BaseModel):
    id: int
    tournament_id: int
    home_team_id: int
    away_team_id: int
    round_number: int
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    is_locked: bool = False

    class Config:
        from_attributes = True


@router.post("/tournaments/{tournament_id}/fixtures/generate")
def generate_tournament_fixtures(
    tournament_id: int,
    request: Optional[GenerateFixturesRequest] = None,
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    """Generate or extend the round-robin calendar (reset=true draws it again from scratch)"""
    reset = request.reset if request is not None else False
    try:
        report = generate_fixtures(session, tournament_id, reset=reset)
        return report.to_dict()
    except TournamentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FixtureInvariantError as e:
        raise HTTPException(status_code=500, detail={"code": "DUPLICATE_PAIRS", "message": str(e)})
    except Exception as e:
        logger.exception(f"Fixture generation failed for tournament {tournament_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@router.get("/tournaments/{tournament_id}/fixtures", response_model=List[MatchResponse])
def list_tournament_fixtures(tournament_id: int, session: Session = Depends(get_session)):
    """List the tournament's matches by round"""
    try:
        get_tournament_or_raise(session, tournament_id)
    except TournamentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    matches = session.exec(
        select(Match).where(Match.tournament_id == tournament_id).order_by(Match.round_number, Match.id)
    ).all()
    return matches


@router.get("/tournaments/{tournament_id}/fixtures/diagnostics")
def get_fixture_diagnostics(tournament_id: int, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """Pair counts and round distribution of the calendar"""
    try:
        return diagnose_fixtures(session, tournament_id).to_dict()
    except TournamentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
