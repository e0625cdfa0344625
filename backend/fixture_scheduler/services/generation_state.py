"""
Generation state snapshot.

Everything the leg orchestrator and the compaction resolver need to know
about the existing calendar is read once per run, after the tournament lock
is held, and passed through the pipeline as plain values.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlmodel import Session, select

from fixture_scheduler.models import Match
from fixture_scheduler.services.pairing import Pairing, pair_key


@dataclass(frozen=True)
class ExistingMatch:
    id: Optional[int]
    home_team_id: int
    away_team_id: int
    round_number: int
    locked: bool

    @property
    def key(self) -> Pairing:
        return pair_key(self.home_team_id, self.away_team_id)

    @classmethod
    def from_match(cls, match: Match) -> "ExistingMatch":
        return cls(
            id=match.id,
            home_team_id=match.home_team_id,
            away_team_id=match.away_team_id,
            round_number=match.round_number,
            locked=match.is_locked,
        )


@dataclass(frozen=True)
class GenerationState:
    first_leg_round_count: int
    matches: Tuple[ExistingMatch, ...] = ()

    @property
    def has_existing_matches(self) -> bool:
        return len(self.matches) > 0

    @property
    def existing_max_round(self) -> int:
        return max((m.round_number for m in self.matches), default=0)

    @property
    def locked_matches_exist(self) -> bool:
        return any(m.locked for m in self.matches)

    @property
    def locked_second_leg_exist(self) -> bool:
        return any(m.locked for m in self.second_leg_matches())

    def first_leg_matches(self) -> List[ExistingMatch]:
        return [m for m in self.matches if m.round_number <= self.first_leg_round_count]

    def second_leg_matches(self) -> List[ExistingMatch]:
        return [m for m in self.matches if m.round_number > self.first_leg_round_count]


def load_existing_matches(session: Session, tournament_id: int) -> Tuple[ExistingMatch, ...]:
    rows = session.exec(
        select(Match).where(Match.tournament_id == tournament_id).order_by(Match.round_number, Match.id)
    ).all()
    return tuple(ExistingMatch.from_match(m) for m in rows)


def load_generation_state(session: Session, tournament_id: int, first_leg_round_count: int) -> GenerationState:
    """Read the tournament's match rows once and build the snapshot."""
    return GenerationState(
        first_leg_round_count=first_leg_round_count,
        matches=load_existing_matches(session, tournament_id),
    )


def split_legs(
    matches: Iterable[ExistingMatch], first_leg_round_count: int
) -> Tuple[List[ExistingMatch], List[ExistingMatch]]:
    """
    Classify match rows into (first_leg, second_leg).

    Within a pair the earlier meeting (by round, then id) is first leg and any
    later one second leg. A pair that met once is placed by the round boundary.
    """
    by_pair: Dict[Pairing, List[ExistingMatch]] = defaultdict(list)
    for match in matches:
        by_pair[match.key].append(match)

    first_leg: List[ExistingMatch] = []
    second_leg: List[ExistingMatch] = []
    for meetings in by_pair.values():
        meetings.sort(key=lambda m: (m.round_number, m.id is None, m.id or 0))
        if len(meetings) == 1:
            only = meetings[0]
            (first_leg if only.round_number <= first_leg_round_count else second_leg).append(only)
        else:
            first_leg.append(meetings[0])
            second_leg.extend(meetings[1:])
    return first_leg, second_leg


@dataclass
class PairLedger:
    """
    Meetings per unordered pair, seeded from the snapshot and updated with
    every match planned during the run.
    """

    counts: Dict[Pairing, int] = field(default_factory=lambda: defaultdict(int))
    orientations: Set[Tuple[int, int]] = field(default_factory=set)
    first_leg_home: Dict[Pairing, int] = field(default_factory=dict)

    @classmethod
    def from_state(cls, state: GenerationState) -> "PairLedger":
        ledger = cls()
        first_leg, second_leg = split_legs(state.matches, state.first_leg_round_count)
        for match in first_leg:
            ledger.record(match.home_team_id, match.away_team_id, first_leg=True)
        for match in second_leg:
            ledger.record(match.home_team_id, match.away_team_id)
        return ledger

    def record(self, home_team_id: int, away_team_id: int, first_leg: bool = False) -> None:
        key = pair_key(home_team_id, away_team_id)
        self.counts[key] += 1
        self.orientations.add((home_team_id, away_team_id))
        if first_leg:
            self.first_leg_home[key] = home_team_id

    def meetings(self, team_a: int, team_b: int) -> int:
        return self.counts.get(pair_key(team_a, team_b), 0)

    def has_orientation(self, home_team_id: int, away_team_id: int) -> bool:
        return (home_team_id, away_team_id) in self.orientations

    def first_leg_home_team(self, team_a: int, team_b: int) -> Optional[int]:
        return self.first_leg_home.get(pair_key(team_a, team_b))
