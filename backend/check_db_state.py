#!/usr/bin/env python3
"""Report whether the database carries the fixture schema (tables, columns, constraints)"""

import sys

from sqlalchemy import inspect, text

from fixture_scheduler.database import engine

REQUIRED_COLUMNS = {
    "tournament": {"id", "name", "mode", "draw_order"},
    "team": {"id", "name"},
    "tournamentteam": {"tournament_id", "team_id", "status"},
    "match": {
        "tournament_id",
        "home_team_id",
        "away_team_id",
        "round_number",
        "scheduled_date",
        "scheduled_time",
        "home_score",
        "away_score",
    },
}
REQUIRED_UNIQUE = {
    "tournamentteam": "uq_tournament_team",
    "match": "uq_match_tournament_home_away",
}


def schema_problems():
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())
    problems = []

    for table, columns in REQUIRED_COLUMNS.items():
        if table not in tables:
            problems.append(f"table {table} is missing")
            continue
        present = {c["name"] for c in inspector.get_columns(table)}
        for column in sorted(columns - present):
            problems.append(f"{table}.{column} is missing")

    for table, name in REQUIRED_UNIQUE.items():
        if table not in tables:
            continue
        names = {u["name"] for u in inspector.get_unique_constraints(table)}
        names |= {i["name"] for i in inspector.get_indexes(table) if i.get("unique")}
        if name not in names:
            problems.append(f"{table}: unique constraint {name} is missing")

    if "alembic_version" in tables:
        with engine.connect() as conn:
            version = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
        print(f"Alembic version: {version}")
    else:
        print("No alembic_version table (schema created by init_db or not at all)")
    return problems


if __name__ == "__main__":
    print(f"Database: {engine.url}")
    problems = schema_problems()
    if problems:
        for problem in problems:
            print(f"✗ {problem}")
        print("Run migrations with: alembic upgrade head")
        sys.exit(1)
    print("✓ Fixture schema is complete")
