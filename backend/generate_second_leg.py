#!/usr/bin/env python3
"""Append the missing matches (e.g. the second leg) of a tournament without a reset.

Usage: python generate_second_leg.py <tournament_id>
"""

import json
import sys

from sqlmodel import Session

from fixture_scheduler.database import engine
from fixture_scheduler.services.fixture_scheduler import generate_fixtures


def main(tournament_id: int) -> int:
    with Session(engine) as session:
        report = generate_fixtures(session, tournament_id, reset=False)
    print(json.dumps(report.to_dict(), indent=2))
    if report.blocked:
        print("Blocked: the calendar already has scheduled or scored matches.")
        return 2
    return 0


if __name__ == "__main__":
    tid = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    sys.exit(main(tid))
