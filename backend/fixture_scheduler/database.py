"""
Engine and session wiring.

Settings come from the environment (a local .env file is honoured):
DATABASE_URL, SQL_ECHO and, for SQLite, SQLITE_TIMEOUT (seconds a writer
waits for the database file lock).
"""

import os
from pathlib import Path
from typing import Any, Dict, Generator, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fixtures.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")
SQLITE_TIMEOUT = float(os.getenv("SQLITE_TIMEOUT", "30"))


def make_engine(url: str, echo: bool = False, **kwargs: Any) -> Engine:
    """
    Create an engine for url.

    SQLite engines may be shared across threads (TestClient, worker pools) and
    get a busy timeout; the directory of a file database is created on demand.
    Extra keyword arguments go straight to create_engine (e.g. poolclass).
    """
    connect_args: Dict[str, Any] = {}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": SQLITE_TIMEOUT}
        database = parsed.database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, connect_args=connect_args, **kwargs)


engine: Engine = make_engine(DATABASE_URL, echo=SQL_ECHO)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request"""
    with Session(engine) as session:
        yield session


def init_db(bind: Optional[Engine] = None) -> None:
    """Create missing tables on bind (the application engine by default)"""
    # Table classes register themselves on SQLModel.metadata when imported
    from fixture_scheduler.models import Match, Team, Tournament, TournamentTeam  # noqa: F401

    SQLModel.metadata.create_all(bind if bind is not None else engine)
