"""
Fixture Scheduler - single entry point for round-robin calendar generation

Pipeline (one transaction, tournament lock held throughout):
0. Lock the tournament, load mode and accepted teams
1. Refuse a second-leg append over a calendar that is already in use
2. Wipe existing matches (reset only)
3. Plan first leg / second leg (leg orchestrator)
4. Insert planned matches that do not exist yet
5. Compact second-leg round numbers (double mode)
6. Pair metrics + duplicate check, commit

Any failure rolls the whole run back; a partially generated calendar is
never committed.
"""

import logging
import random
from collections import Counter, defaultdict
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from fixture_scheduler.models import ENROLLMENT_ACCEPTED, Match, Tournament, TournamentTeam
from fixture_scheduler.services.compaction import apply_compaction, plan_compaction
from fixture_scheduler.services.generation_state import (
    GenerationState,
    PairLedger,
    load_existing_matches,
    load_generation_state,
)
from fixture_scheduler.services.leg_orchestrator import (
    MAX_MEETINGS,
    MODE_DOUBLE,
    MODE_SINGLE,
    PlannedMatch,
    activation_blocked,
    plan_first_leg,
    plan_second_leg,
    should_generate_first_leg,
)
from fixture_scheduler.services.pairing import logical_team_count, pad_with_bye, round_count
from fixture_scheduler.utils.sql import scalar_int
from fixture_scheduler.utils.tournament_lock import acquire_tournament_lock

logger = logging.getLogger(__name__)


# ============================================================================
# Errors
# ============================================================================


class FixtureSchedulerError(Exception):
    """Base exception for fixture generation errors"""

    pass


class TournamentNotFoundError(FixtureSchedulerError):
    """Tournament id does not resolve to a stored tournament"""

    def __init__(self, tournament_id: int):
        super().__init__(f"Tournament {tournament_id} not found")
        self.tournament_id = tournament_id


class FixtureStorageError(FixtureSchedulerError):
    """Database read/write failed; the run was rolled back"""

    pass


class FixtureInvariantError(FixtureSchedulerError):
    """A pair met more often than the mode allows after generation"""

    def __init__(self, tournament_id: int, mode: str, duplicate_count: int):
        super().__init__(
            f"Tournament {tournament_id} ({mode}): {duplicate_count} pairs exceed "
            f"{MAX_MEETINGS.get(mode)} meeting(s)"
        )
        self.tournament_id = tournament_id
        self.mode = mode
        self.duplicate_count = duplicate_count


# ============================================================================
# Report
# ============================================================================


class FixtureGenerationReport:
    """Summary of one generation run"""

    def __init__(self, tournament_id: int, mode: str, reset: bool = False):
        self.tournament_id = tournament_id
        self.mode = mode
        self.reset = reset
        self.blocked = False
        self.created_count = 0
        self.team_count = 0
        self.expected_total = 0
        self.unique_pairs = 0
        self.duplicate_count = 0
        self.compacted_count = 0
        self.rounds: List[Dict[str, int]] = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "mode": self.mode,
            "reset": self.reset,
            "blocked": self.blocked,
            "created_count": self.created_count,
            "team_count": self.team_count,
            "expected_total": self.expected_total,
            "unique_pairs": self.unique_pairs,
            "duplicate_count": self.duplicate_count,
            "compacted_count": self.compacted_count,
            "rounds": self.rounds,
        }


# ============================================================================
# Storage helpers
# ============================================================================


def get_tournament_or_raise(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError(tournament_id)
    return tournament


def get_accepted_team_ids(session: Session, tournament_id: int) -> List[int]:
    """Accepted team ids, ascending (canonical deterministic order)."""
    rows = session.exec(
        select(TournamentTeam.team_id)
        .where(TournamentTeam.tournament_id == tournament_id)
        .where(TournamentTeam.status == ENROLLMENT_ACCEPTED)
        .order_by(TournamentTeam.team_id)
    ).all()
    return [int(team_id) for team_id in rows]


def resolve_draw_order(accepted_ids: List[int], stored_order: Optional[List[int]]) -> List[int]:
    """
    Order used by a non-reset run.

    Stored draw order restricted to still-accepted teams, then newly accepted
    teams ascending by id. Without a stored order: ascending ids.
    """
    accepted = set(accepted_ids)
    order = [team_id for team_id in (stored_order or []) if team_id in accepted]
    seen = set(order)
    order.extend(team_id for team_id in sorted(accepted_ids) if team_id not in seen)
    return order


def delete_tournament_matches(session: Session, tournament_id: int, after_round: int = 0) -> int:
    """Delete the tournament's matches with round_number > after_round (all by default)."""
    existing_matches = session.exec(
        select(Match).where(Match.tournament_id == tournament_id).where(Match.round_number > after_round)
    ).all()
    for match in existing_matches:
        session.delete(match)
    session.flush()
    return len(existing_matches)


def insert_match_if_absent(
    session: Session,
    tournament_id: int,
    home_team_id: int,
    away_team_id: int,
    round_number: int,
    mode: str,
) -> Optional[Match]:
    """
    Insert a match unless the mode's duplicate rule already covers it.

    single: no match for the pair in either orientation may exist.
    double: the exact orientation must be new and the pair must have met
    fewer than two times.

    Returns:
        The new Match, or None when nothing was inserted.
    """
    if home_team_id == away_team_id:
        raise ValueError(f"Team {home_team_id} cannot play itself")

    same_pair = or_(
        and_(Match.home_team_id == home_team_id, Match.away_team_id == away_team_id),
        and_(Match.home_team_id == away_team_id, Match.away_team_id == home_team_id),
    )
    pair_count = scalar_int(
        session.exec(
            select(func.count(Match.id)).where(Match.tournament_id == tournament_id).where(same_pair)
        ).one()
    )
    if mode == MODE_SINGLE:
        if pair_count > 0:
            return None
    else:
        same_orientation = session.exec(
            select(Match.id)
            .where(Match.tournament_id == tournament_id)
            .where(Match.home_team_id == home_team_id)
            .where(Match.away_team_id == away_team_id)
        ).first()
        if same_orientation is not None or pair_count >= MAX_MEETINGS[MODE_DOUBLE]:
            return None

    match = Match(
        tournament_id=tournament_id,
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        round_number=round_number,
    )
    session.add(match)
    session.flush()
    return match


def count_tournament_matches(session: Session, tournament_id: int) -> int:
    return scalar_int(
        session.exec(select(func.count(Match.id)).where(Match.tournament_id == tournament_id)).one()
    )


def count_pair_meetings(session: Session, tournament_id: int, mode: str) -> Tuple[int, int]:
    """Return (unique_pairs, duplicate_count) for the tournament's matches."""
    meetings = Counter(m.key for m in load_existing_matches(session, tournament_id))
    allowed = MAX_MEETINGS.get(mode, 1)
    duplicates = sum(1 for count in meetings.values() if count > allowed)
    return len(meetings), duplicates


def expected_total(mode: str, team_count: int) -> int:
    if team_count < 2:
        return 0
    if mode == MODE_DOUBLE:
        return team_count * (team_count - 1)
    return team_count * (team_count - 1) // 2


# ============================================================================
# Generation
# ============================================================================


def _write_planned(session: Session, tournament_id: int, mode: str, planned: List[PlannedMatch]) -> List[Match]:
    created: List[Match] = []
    for plan in planned:
        match = insert_match_if_absent(
            session, tournament_id, plan.home_team_id, plan.away_team_id, plan.round_number, mode
        )
        if match is not None:
            created.append(match)
    return created


def run_generation(
    session: Session,
    tournament: Tournament,
    reset: bool = False,
    rng: Optional[random.Random] = None,
) -> FixtureGenerationReport:
    """
    Generate fixtures inside the caller's transaction.

    The caller must hold the tournament lock and owns commit/rollback.
    """
    if rng is None:
        rng = random.Random()
    tournament_id = tournament.id
    mode = tournament.mode or MODE_SINGLE
    if mode not in MAX_MEETINGS:
        raise ValueError(f"Tournament {tournament_id} has unknown mode {mode!r}")

    report = FixtureGenerationReport(tournament_id, mode, reset=reset)

    accepted_ids = get_accepted_team_ids(session, tournament_id)
    if reset:
        team_ids = list(accepted_ids)
        rng.shuffle(team_ids)
    else:
        team_ids = resolve_draw_order(accepted_ids, tournament.draw_order)
    order = pad_with_bye(team_ids)
    team_count = logical_team_count(order)
    first_leg_rounds = round_count(team_count)
    report.team_count = team_count
    report.expected_total = expected_total(mode, team_count)

    state = load_generation_state(session, tournament_id, first_leg_rounds)

    if activation_blocked(mode, reset, state):
        logger.warning(
            f"Tournament {tournament_id}: second leg refused, calendar already has scheduled or scored matches"
        )
        report.blocked = True
        report.unique_pairs, report.duplicate_count = count_pair_meetings(session, tournament_id, mode)
        return report

    if reset:
        deleted = delete_tournament_matches(session, tournament_id)
        logger.info(f"Tournament {tournament_id}: reset removed {deleted} matches")
        state = GenerationState(first_leg_round_count=first_leg_rounds)

    if team_count < 2:
        logger.info(f"Tournament {tournament_id}: {team_count} accepted teams, nothing to generate")
        report.unique_pairs, report.duplicate_count = count_pair_meetings(session, tournament_id, mode)
        return report

    if tournament.draw_order != team_ids:
        tournament.draw_order = team_ids
        session.add(tournament)

    ledger = PairLedger.from_state(state)
    created: List[Match] = []
    if should_generate_first_leg(mode, reset, state):
        created.extend(_write_planned(session, tournament_id, mode, plan_first_leg(order, mode, ledger, rng)))
    if mode == MODE_DOUBLE:
        created.extend(
            _write_planned(session, tournament_id, mode, plan_second_leg(order, state, ledger, reset, rng))
        )
        reassignments = plan_compaction(order, first_leg_rounds, load_existing_matches(session, tournament_id))
        report.compacted_count = apply_compaction(session, reassignments)

    report.created_count = len(created)
    per_round: Dict[int, int] = defaultdict(int)
    for match in created:
        per_round[match.round_number] += 1
    report.rounds = [{"round_number": r, "match_count": per_round[r]} for r in sorted(per_round)]

    report.unique_pairs, report.duplicate_count = count_pair_meetings(session, tournament_id, mode)
    if report.duplicate_count > 0:
        logger.error(
            f"Tournament {tournament_id}: {report.duplicate_count} pairs exceed the {mode} meeting limit"
        )
        raise FixtureInvariantError(tournament_id, mode, report.duplicate_count)

    total_matches = count_tournament_matches(session, tournament_id)
    if total_matches < report.expected_total:
        logger.warning(
            f"Tournament {tournament_id} ({mode}): calendar holds {total_matches} of "
            f"{report.expected_total} matches; generate with reset=true to draw it again"
        )

    logger.info(
        f"Tournament {tournament_id} ({mode}): created {report.created_count} matches, "
        f"{report.unique_pairs}/{team_count * (team_count - 1) // 2} pairs, "
        f"expected total {report.expected_total}"
    )
    return report


def generate_fixtures(
    session: Session,
    tournament_id: int,
    reset: bool = False,
    rng: Optional[random.Random] = None,
) -> FixtureGenerationReport:
    """
    Generate (or extend) the round-robin calendar of a tournament.

    Args:
        session: Database session; committed on success, rolled back on error
        tournament_id: Tournament ID
        reset: Delete every existing match and draw a fresh calendar
        rng: Source of randomness for the reset draw and insertion order

    Returns:
        FixtureGenerationReport (blocked=True when a second-leg append was refused)

    Raises:
        TournamentNotFoundError: Unknown tournament
        FixtureInvariantError: Duplicate pairs detected after generation
        FixtureStorageError: Database failure
    """
    try:
        acquire_tournament_lock(session, tournament_id)
        tournament = get_tournament_or_raise(session, tournament_id)
        report = run_generation(session, tournament, reset=reset, rng=rng)
        session.commit()
        return report
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Tournament {tournament_id}: fixture generation failed: {e}")
        raise FixtureStorageError(f"Fixture generation failed for tournament {tournament_id}: {e}") from e
    except Exception:
        session.rollback()
        raise
