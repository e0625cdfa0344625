"""
Compaction Resolver

After a second leg has been appended (possibly over several runs), or after
the set of accepted teams has changed, round numbers may be scattered or the
two legs may overlap. The resolver re-derives the canonical circle structure
from the draw order and moves every match to its canonical round:

- first leg: round r + 1
- second leg: round first_leg_round_count + r + 1

where r is the circle round in which the pair meets. A pair's earlier meeting
is its first-leg match and the later one its second-leg match; a pair that met
once is placed by the first-leg round boundary.

Scheduled or scored matches are never renumbered. The first leg is only
renumbered when nothing in the calendar is locked; the second leg is left
alone when any of its own matches is locked.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from sqlmodel import Session

from fixture_scheduler.models import Match
from fixture_scheduler.services.generation_state import ExistingMatch, split_legs
from fixture_scheduler.services.pairing import Pairing, circle_rounds, pair_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundReassignment:
    match_id: int
    from_round: int
    to_round: int


def canonical_rounds(order: Sequence[Optional[int]], base_round: int = 0) -> Dict[Pairing, int]:
    """Map each unordered pair to base_round + r + 1 for its circle round r."""
    targets: Dict[Pairing, int] = {}
    for r, pairings in enumerate(circle_rounds(order)):
        for first, second in pairings:
            targets[pair_key(first, second)] = base_round + r + 1
    return targets


def _reassign(matches: Sequence[ExistingMatch], targets: Dict[Pairing, int]) -> List[RoundReassignment]:
    by_pair: Dict[Pairing, ExistingMatch] = {}
    for match in sorted(matches, key=lambda m: (m.id is None, m.id or 0)):
        by_pair[match.key] = match

    reassignments: List[RoundReassignment] = []
    for key, target in sorted(targets.items(), key=lambda item: (item[1], item[0])):
        match = by_pair.get(key)
        if match is None or match.round_number == target:
            continue
        if match.id is None:
            raise ValueError(f"Match for pair {key} has no id; flush before compaction")
        reassignments.append(RoundReassignment(match.id, match.round_number, target))
    return reassignments


def plan_compaction(
    order: Sequence[Optional[int]],
    first_leg_round_count: int,
    matches: Iterable[ExistingMatch],
) -> List[RoundReassignment]:
    """
    Compute the round-number changes that make both legs contiguous.

    Args:
        order: Padded draw order the calendar was generated from.
        first_leg_round_count: Rounds in one leg.
        matches: Current match rows of the tournament (any leg).

    Returns:
        First-leg reassignments followed by second-leg reassignments. The
        second leg starts after the highest first-leg round, so the two legs
        never share a round number.
    """
    matches = list(matches)
    first_leg, second_leg = split_legs(matches, first_leg_round_count)
    reassignments: List[RoundReassignment] = []

    first_leg_rounds = {m.key: m.round_number for m in first_leg}
    first_leg_targets = canonical_rounds(order)
    if (
        first_leg
        and not any(m.locked for m in matches)
        and all(m.key in first_leg_targets for m in first_leg)
    ):
        reassignments.extend(_reassign(first_leg, first_leg_targets))
        first_leg_rounds = {m.key: first_leg_targets[m.key] for m in first_leg}

    if not second_leg:
        return reassignments
    if any(m.locked for m in second_leg):
        logger.info("Second leg has scheduled or scored matches; second-leg compaction skipped")
        return reassignments

    base_round = max([first_leg_round_count, *first_leg_rounds.values()])
    reassignments.extend(_reassign(second_leg, canonical_rounds(order, base_round)))
    return reassignments


def apply_compaction(session: Session, reassignments: Sequence[RoundReassignment]) -> int:
    """Write reassigned round numbers. Only round_number is touched."""
    for change in reassignments:
        match = session.get(Match, change.match_id)
        if match is None:
            raise ValueError(f"Match {change.match_id} disappeared during compaction")
        match.round_number = change.to_round
        session.add(match)
    if reassignments:
        session.flush()
        logger.info(f"Compaction moved {len(reassignments)} matches")
    return len(reassignments)
