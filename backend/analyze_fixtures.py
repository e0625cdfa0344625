#!/usr/bin/env python3
"""Print the round distribution and pair counts of a tournament's calendar.

Usage: python analyze_fixtures.py <tournament_id>
"""

import sys

from sqlmodel import Session

from fixture_scheduler.database import engine
from fixture_scheduler.services.fixture_diagnostics import diagnose_fixtures

tournament_id = int(sys.argv[1]) if len(sys.argv) > 1 else 1

with Session(engine) as s:
    d = diagnose_fixtures(s, tournament_id)

    print(f"Tournament: {d.tournament_id} ({d.mode})")
    print(f"Total matches: {d.total_matches}")
    print(f"Locked (scheduled/scored): {d.locked_matches}")
    print()

    print("=== Matches per round ===")
    for r, count in sorted(d.matches_by_round.items()):
        print(f"  round={r} | count={count}")
    if d.round_gaps:
        print(f"  missing rounds: {d.round_gaps}")

    print()
    print("=== Pair counts ===")
    print(f"  pairs with 1 match:  {d.pairs_with_one}")
    print(f"  pairs with 2 matches: {d.pairs_with_two}")
    print(f"  pairs with >2 matches: {d.pairs_with_more}")
    print(f"  pairs met in both orientations: {d.pairs_both_orientations}")
