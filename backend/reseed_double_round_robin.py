#!/usr/bin/env python3
"""Redraw a tournament from scratch as a double round-robin.

Sequence: switch to single mode, reset-generate the first leg, switch to
double mode (which appends the reversed second leg).

Usage: python reseed_double_round_robin.py <tournament_id>
"""

import sys

from sqlmodel import Session

from fixture_scheduler.database import engine
from fixture_scheduler.services.fixture_scheduler import generate_fixtures
from fixture_scheduler.services.fixture_diagnostics import diagnose_fixtures
from fixture_scheduler.services.mode_transition import change_tournament_mode


def main(tournament_id: int) -> int:
    print(f"Tournament={tournament_id} :: reset -> single leg -> double round-robin")
    with Session(engine) as session:
        to_single = change_tournament_mode(session, tournament_id, "single")
        if to_single.blocked:
            print("Blocked: second-leg matches are already scheduled or scored.")
            return 2

        first_leg = generate_fixtures(session, tournament_id, reset=True)
        print(f"First leg: created={first_leg.created_count} expected={first_leg.expected_total}")

        to_double = change_tournament_mode(session, tournament_id, "double")
        if to_double.blocked:
            print("Blocked: could not append the second leg.")
            return 2
        second_leg = to_double.generation
        print(f"Second leg: created={second_leg.created_count} expected total={second_leg.expected_total}")

        diagnostics = diagnose_fixtures(session, tournament_id)
        print(
            f"Total={diagnostics.total_matches} pairs(1)={diagnostics.pairs_with_one} "
            f"pairs(2)={diagnostics.pairs_with_two} pairs(>2)={diagnostics.pairs_with_more}"
        )
    return 0


if __name__ == "__main__":
    tid = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    sys.exit(main(tid))
