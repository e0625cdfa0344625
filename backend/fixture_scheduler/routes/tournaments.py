import logging
from typing import Any, Dict, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from fixture_scheduler.database import get_session
from fixture_scheduler.services.fixture_scheduler import (
    FixtureInvariantError,
    TournamentNotFoundError,
    get_tournament_or_raise,
)
from fixture_scheduler.services.mode_transition import change_tournament_mode

logger = logging.getLogger(__name__)

router = APIRouter()


class TournamentModeUpdate(BaseModel):
    mode: Literal["single", "double"]


@router.get("/tournaments/{tournament_id}/mode")
def get_tournament_mode(tournament_id: int, session: Session = Depends(get_session)) -> Dict[str, Any]:
    try:
        tournament = get_tournament_or_raise(session, tournament_id)
    except TournamentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"tournament_id": tournament.id, "mode": tournament.mode}


@router.put("/tournaments/{tournament_id}/mode")
def update_tournament_mode(
    tournament_id: int, data: TournamentModeUpdate, session: Session = Depends(get_session)
) -> Dict[str, Any]:
    """
    Switch between single and double round-robin.

    A refused switch (calendar already scheduled or scored) answers 200 with
    blocked=true so the organizer can be told what to change.
    """
    try:
        result = change_tournament_mode(session, tournament_id, data.mode)
        return result.to_dict()
    except TournamentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FixtureInvariantError as e:
        raise HTTPException(status_code=500, detail={"code": "DUPLICATE_PAIRS", "message": str(e)})
    except Exception as e:
        logger.exception(f"Mode change failed for tournament {tournament_id}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")
