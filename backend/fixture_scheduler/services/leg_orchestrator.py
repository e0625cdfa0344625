"""
Leg Orchestrator

Decides which legs a generation run produces and plans the matches of each
leg with their home/away orientation and round number. Planning is a pure
function of the draw order, the generation state snapshot and the pair
ledger; writing the planned rows is left to the scheduler.

Orientation rules:
- First leg: in even-indexed rounds the circle's first member is home, in
  odd-indexed rounds it is away.
- Second leg: the home side of the pair's first-leg match becomes away. When
  no first-leg match is known the inverted round-parity rule is used.
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from fixture_scheduler.services.generation_state import GenerationState, PairLedger
from fixture_scheduler.services.pairing import circle_rounds

logger = logging.getLogger(__name__)

MODE_SINGLE = "single"
MODE_DOUBLE = "double"

# Meetings allowed per unordered pair
MAX_MEETINGS = {MODE_SINGLE: 1, MODE_DOUBLE: 2}


@dataclass(frozen=True)
class PlannedMatch:
    home_team_id: int
    away_team_id: int
    round_number: int
    leg: int


def should_generate_first_leg(mode: str, reset: bool, state: GenerationState) -> bool:
    return reset or mode == MODE_SINGLE or not state.has_existing_matches


def activation_blocked(mode: str, reset: bool, state: GenerationState) -> bool:
    """Appending a second leg is refused once any match is scheduled or scored."""
    return mode == MODE_DOUBLE and not reset and state.locked_matches_exist


def deactivation_blocked(state: GenerationState) -> bool:
    """Dropping the second leg is refused once any second-leg match is scheduled or scored."""
    return state.locked_second_leg_exist


def _insertion_order(pairs: List[PlannedMatch], rng: Optional[random.Random]) -> List[PlannedMatch]:
    # Presentation only: which match of a round is written first
    if rng is not None:
        rng.shuffle(pairs)
    return pairs


def plan_first_leg(
    order: Sequence[Optional[int]],
    mode: str,
    ledger: PairLedger,
    rng: Optional[random.Random] = None,
) -> List[PlannedMatch]:
    """
    Plan the first leg over a padded draw order.

    Rounds are numbered 1..N-1. A pairing is skipped when the ledger already
    holds it: in single mode any orientation of the pair counts, in double
    mode only the same orientation (or a pair that already met twice).
    """
    if mode not in MAX_MEETINGS:
        raise ValueError(f"Unknown tournament mode: {mode}")

    planned: List[PlannedMatch] = []
    for r, pairings in enumerate(circle_rounds(order)):
        round_number = r + 1
        candidates = []
        for first, second in pairings:
            home, away = (first, second) if r % 2 == 0 else (second, first)
            candidates.append(PlannedMatch(home, away, round_number, leg=1))

        for candidate in _insertion_order(candidates, rng):
            home, away = candidate.home_team_id, candidate.away_team_id
            if mode == MODE_SINGLE:
                if ledger.meetings(home, away) > 0:
                    continue
            elif ledger.has_orientation(home, away) or ledger.meetings(home, away) >= MAX_MEETINGS[MODE_DOUBLE]:
                continue
            ledger.record(home, away, first_leg=True)
            planned.append(candidate)
    return planned


def second_leg_round_base(reset: bool, state: GenerationState) -> int:
    """Round number preceding the first round of a freshly appended second leg."""
    if not reset and state.has_existing_matches:
        return state.existing_max_round
    return state.first_leg_round_count


def plan_second_leg(
    order: Sequence[Optional[int]],
    state: GenerationState,
    ledger: PairLedger,
    reset: bool = False,
    rng: Optional[random.Random] = None,
) -> List[PlannedMatch]:
    """
    Plan the reversed second leg over the same draw order.

    Each pair's orientation is the reverse of its first-leg match as recorded
    in the ledger. A pairing is skipped when its exact orientation already
    exists or the pair has met twice already.
    """
    base = second_leg_round_base(reset, state)
    planned: List[PlannedMatch] = []
    for r, pairings in enumerate(circle_rounds(order)):
        round_number = base + r + 1
        candidates = []
        for first, second in pairings:
            if ledger.meetings(first, second) >= MAX_MEETINGS[MODE_DOUBLE]:
                continue
            first_leg_home = ledger.first_leg_home_team(first, second)
            if first_leg_home is not None:
                home = second if first_leg_home == first else first
            else:
                logger.warning(
                    f"No first-leg match for pair ({first}, {second}); "
                    f"using round parity for second-leg orientation"
                )
                home = second if r % 2 == 0 else first
            away = first if home == second else second
            candidates.append(PlannedMatch(home, away, round_number, leg=2))

        for candidate in _insertion_order(candidates, rng):
            home, away = candidate.home_team_id, candidate.away_team_id
            if ledger.has_orientation(home, away) or ledger.meetings(home, away) >= MAX_MEETINGS[MODE_DOUBLE]:
                continue
            ledger.record(home, away)
            planned.append(candidate)
    return planned
