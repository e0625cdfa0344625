from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from fixture_scheduler.models.team import Team
    from fixture_scheduler.models.tournament import Tournament

ENROLLMENT_ACCEPTED = "accepted"


class TournamentTeam(SQLModel, table=True):
    """Enrollment of a team in a tournament. Only accepted teams get fixtures."""

    __table_args__ = (SAUniqueConstraint("tournament_id", "team_id", name="uq_tournament_team"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    team_id: int = Field(foreign_key="team.id", index=True)
    status: str = Field(default="pending")  # "pending" | "accepted" | "rejected"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="enrollments")
    team: "Team" = Relationship(back_populates="enrollments")
