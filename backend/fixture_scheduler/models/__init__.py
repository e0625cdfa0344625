from fixture_scheduler.models.match import Match
from fixture_scheduler.models.team import Team
from fixture_scheduler.models.tournament import TOURNAMENT_MODES, Tournament
from fixture_scheduler.models.tournament_team import ENROLLMENT_ACCEPTED, TournamentTeam

__all__ = [
    "Tournament",
    "TOURNAMENT_MODES",
    "Team",
    "TournamentTeam",
    "ENROLLMENT_ACCEPTED",
    "Match",
]
