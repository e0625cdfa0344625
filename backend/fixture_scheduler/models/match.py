from datetime import date, datetime, time
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from fixture_scheduler.models.tournament import Tournament


class Match(SQLModel, table=True):
    __table_args__ = (
        # A given orientation is played at most once per tournament in either mode
        SAUniqueConstraint("tournament_id", "home_team_id", "away_team_id", name="uq_match_tournament_home_away"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    home_team_id: int = Field(foreign_key="team.id")
    away_team_id: int = Field(foreign_key="team.id")
    round_number: int = Field(index=True)  # 1-based, dense within a leg

    # Filled in by organizers after generation; any of these locks the match
    scheduled_date: Optional[date] = Field(default=None)
    scheduled_time: Optional[time] = Field(default=None)
    home_score: Optional[int] = Field(default=None)
    away_score: Optional[int] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="matches")

    @property
    def is_locked(self) -> bool:
        return (
            self.scheduled_date is not None
            or self.scheduled_time is not None
            or self.home_score is not None
            or self.away_score is not None
        )
