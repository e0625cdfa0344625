import os

# Keep the app's own engine off disk; every test gets its own engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from typing import List, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, select  # noqa: E402

from fixture_scheduler.database import get_session, init_db, make_engine  # noqa: E402
from fixture_scheduler.main import app  # noqa: E402
from fixture_scheduler.models import Match, Team, Tournament, TournamentTeam  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"


# ============================================================================
# Test Database Setup
# ============================================================================
# 1. Fresh sqlite:///:memory: engine per test with StaticPool so all sessions
#    of that test share the same DB (ids start at 1 in every test)
# 2. check_same_thread=False required for TestClient/threaded access
# 3. App dependency overridden to use the test engine (see client_fixture)


@pytest.fixture(name="engine")
def engine_fixture():
    engine = make_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    """Provide a test database session"""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(engine):
    """Provide a test client whose requests use the test engine"""

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


# ============================================================================
# Data helpers
# ============================================================================


def create_tournament(
    session: Session,
    team_count: int,
    mode: str = "single",
    name: str = "Liga Test",
    rejected: int = 0,
) -> Tournament:
    """Create a tournament with team_count accepted teams (plus optional rejected ones)."""
    tournament = Tournament(name=name, mode=mode)
    session.add(tournament)
    session.commit()
    session.refresh(tournament)

    for i in range(team_count + rejected):
        team = Team(name=f"{name} Team {i + 1}")
        session.add(team)
        session.flush()
        status = "accepted" if i < team_count else "rejected"
        session.add(TournamentTeam(tournament_id=tournament.id, team_id=team.id, status=status))
    session.commit()
    session.refresh(tournament)
    return tournament


def accept_new_team(session: Session, tournament_id: int, name: str = "Late Entry") -> int:
    team = Team(name=name)
    session.add(team)
    session.flush()
    session.add(TournamentTeam(tournament_id=tournament_id, team_id=team.id, status="accepted"))
    session.commit()
    return team.id


def add_match(
    session: Session,
    tournament_id: int,
    home: int,
    away: int,
    round_number: int,
    home_score: Optional[int] = None,
) -> Match:
    match = Match(
        tournament_id=tournament_id,
        home_team_id=home,
        away_team_id=away,
        round_number=round_number,
        home_score=home_score,
    )
    session.add(match)
    session.commit()
    session.refresh(match)
    return match


def tournament_matches(session: Session, tournament_id: int) -> List[Match]:
    session.expire_all()
    return list(
        session.exec(
            select(Match).where(Match.tournament_id == tournament_id).order_by(Match.round_number, Match.id)
        ).all()
    )
