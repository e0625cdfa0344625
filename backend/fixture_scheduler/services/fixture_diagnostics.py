"""
Fixture diagnostics (read-only).

Inspects a tournament's calendar: matches per round, how many times each
pair meets, pairs met in both orientations and missing round numbers.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlmodel import Session

from fixture_scheduler.services.fixture_scheduler import get_tournament_or_raise
from fixture_scheduler.services.generation_state import load_existing_matches


@dataclass
class FixtureDiagnostics:
    tournament_id: int
    mode: str
    total_matches: int = 0
    locked_matches: int = 0
    matches_by_round: Dict[int, int] = field(default_factory=dict)
    pairs_with_one: int = 0
    pairs_with_two: int = 0
    pairs_with_more: int = 0
    pairs_both_orientations: int = 0
    round_gaps: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "mode": self.mode,
            "total_matches": self.total_matches,
            "locked_matches": self.locked_matches,
            "matches_by_round": [
                {"round_number": r, "match_count": c} for r, c in sorted(self.matches_by_round.items())
            ],
            "pairs_with_one": self.pairs_with_one,
            "pairs_with_two": self.pairs_with_two,
            "pairs_with_more": self.pairs_with_more,
            "pairs_both_orientations": self.pairs_both_orientations,
            "round_gaps": self.round_gaps,
        }


def diagnose_fixtures(session: Session, tournament_id: int) -> FixtureDiagnostics:
    tournament = get_tournament_or_raise(session, tournament_id)
    matches = load_existing_matches(session, tournament_id)

    diagnostics = FixtureDiagnostics(tournament_id=tournament_id, mode=tournament.mode)
    diagnostics.total_matches = len(matches)
    diagnostics.locked_matches = sum(1 for m in matches if m.locked)
    diagnostics.matches_by_round = dict(Counter(m.round_number for m in matches))

    pair_counts = Counter(m.key for m in matches)
    diagnostics.pairs_with_one = sum(1 for c in pair_counts.values() if c == 1)
    diagnostics.pairs_with_two = sum(1 for c in pair_counts.values() if c == 2)
    diagnostics.pairs_with_more = sum(1 for c in pair_counts.values() if c > 2)

    homes_by_pair: Dict[Any, set] = {}
    for m in matches:
        homes_by_pair.setdefault(m.key, set()).add(m.home_team_id)
    diagnostics.pairs_both_orientations = sum(1 for homes in homes_by_pair.values() if len(homes) == 2)

    if matches:
        max_round = max(diagnostics.matches_by_round)
        diagnostics.round_gaps = [r for r in range(1, max_round) if r not in diagnostics.matches_by_round]
    return diagnostics
