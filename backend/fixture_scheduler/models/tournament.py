from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from fixture_scheduler.models.match import Match
    from fixture_scheduler.models.tournament_team import TournamentTeam

TOURNAMENT_MODES = ("single", "double")


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    organizer_id: Optional[int] = Field(default=None, index=True)  # owned by the accounts service
    mode: str = Field(default="single")  # "single" | "double"
    # Team ids in the order the last reset draw used; reused for deterministic appends
    draw_order: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    enrollments: List["TournamentTeam"] = Relationship(back_populates="tournament")
    matches: List["Match"] = Relationship(back_populates="tournament")
