"""
Tournament mode transitions (single <-> double round-robin).

single -> double: refused while any match is scheduled or scored; otherwise
the mode is switched and the second leg is appended in the same transaction.

double -> single: refused while any second-leg match is scheduled or scored;
otherwise second-leg matches are removed, the mode is switched and the first
leg is completed.
"""

import logging
import random
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from fixture_scheduler.models import TOURNAMENT_MODES
from fixture_scheduler.services.fixture_scheduler import (
    FixtureGenerationReport,
    FixtureStorageError,
    delete_tournament_matches,
    get_accepted_team_ids,
    get_tournament_or_raise,
    run_generation,
)
from fixture_scheduler.services.generation_state import load_generation_state
from fixture_scheduler.services.leg_orchestrator import MODE_DOUBLE, MODE_SINGLE, deactivation_blocked
from fixture_scheduler.services.pairing import round_count
from fixture_scheduler.utils.tournament_lock import acquire_tournament_lock

logger = logging.getLogger(__name__)


class ModeChangeResult:
    """Outcome of a mode change request"""

    def __init__(self, tournament_id: int, previous_mode: str, mode: str):
        self.tournament_id = tournament_id
        self.previous_mode = previous_mode
        self.mode = mode
        self.blocked = False
        self.removed_count = 0
        self.generation: Optional[FixtureGenerationReport] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "previous_mode": self.previous_mode,
            "mode": self.mode,
            "blocked": self.blocked,
            "removed_count": self.removed_count,
            "generation": self.generation.to_dict() if self.generation is not None else None,
        }


def _activate_double(
    session: Session, tournament, result: ModeChangeResult, rng: Optional[random.Random]
) -> None:
    tournament.mode = MODE_DOUBLE
    session.add(tournament)
    session.flush()
    report = run_generation(session, tournament, reset=False, rng=rng)
    if report.blocked:
        # The caller rolls back, which also restores the mode
        result.blocked = True
        result.mode = MODE_SINGLE
    result.generation = report


def _deactivate_double(
    session: Session, tournament, result: ModeChangeResult, rng: Optional[random.Random]
) -> None:
    team_count = len(get_accepted_team_ids(session, tournament.id))
    first_leg_rounds = round_count(team_count)
    state = load_generation_state(session, tournament.id, first_leg_rounds)
    if deactivation_blocked(state):
        logger.warning(
            f"Tournament {tournament.id}: cannot leave double mode, second leg has scheduled or scored matches"
        )
        result.blocked = True
        result.mode = MODE_DOUBLE
        return

    result.removed_count = delete_tournament_matches(session, tournament.id, after_round=first_leg_rounds)
    tournament.mode = MODE_SINGLE
    session.add(tournament)
    session.flush()
    result.generation = run_generation(session, tournament, reset=False, rng=rng)


def change_tournament_mode(
    session: Session,
    tournament_id: int,
    mode: str,
    rng: Optional[random.Random] = None,
) -> ModeChangeResult:
    """
    Switch a tournament between single and double round-robin.

    Runs in one transaction under the tournament lock. A refused transition
    returns blocked=True and leaves every row untouched.

    Raises:
        ValueError: Unknown mode
        TournamentNotFoundError: Unknown tournament
        FixtureStorageError: Database failure
    """
    if mode not in TOURNAMENT_MODES:
        raise ValueError(f"Unknown tournament mode: {mode}")

    try:
        acquire_tournament_lock(session, tournament_id)
        tournament = get_tournament_or_raise(session, tournament_id)
        previous_mode = tournament.mode or MODE_SINGLE
        result = ModeChangeResult(tournament_id, previous_mode, mode)

        if previous_mode != mode:
            if mode == MODE_DOUBLE:
                _activate_double(session, tournament, result, rng)
            else:
                _deactivate_double(session, tournament, result, rng)

        if result.blocked:
            session.rollback()
        else:
            session.commit()
        logger.info(
            f"Tournament {tournament_id}: mode {previous_mode} -> {mode} "
            f"({'blocked' if result.blocked else 'applied'}, removed {result.removed_count})"
        )
        return result
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Tournament {tournament_id}: mode change failed: {e}")
        raise FixtureStorageError(f"Mode change failed for tournament {tournament_id}: {e}") from e
    except Exception:
        session.rollback()
        raise
