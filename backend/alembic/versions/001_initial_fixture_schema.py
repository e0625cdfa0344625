"""Initial fixture scheduler schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy import inspect

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    tables = inspect(bind).get_table_names()

    if "tournament" not in tables:
        op.create_table(
            "tournament",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("organizer_id", sa.Integer(), nullable=True),
            sa.Column("mode", sa.String(), nullable=False, server_default="single"),
            sa.Column("draw_order", sa.JSON(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_tournament_organizer_id"), "tournament", ["organizer_id"], unique=False)

    if "team" not in tables:
        op.create_table(
            "team",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )

    if "tournamentteam" not in tables:
        op.create_table(
            "tournamentteam",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("tournament_id", sa.Integer(), nullable=False),
            sa.Column("team_id", sa.Integer(), nullable=False),
            sa.Column("status", sa.String(), nullable=False, server_default="pending"),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
            sa.ForeignKeyConstraint(["team_id"], ["team.id"]),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("tournament_id", "team_id", name="uq_tournament_team"),
        )
        op.create_index(op.f("ix_tournamentteam_tournament_id"), "tournamentteam", ["tournament_id"], unique=False)
        op.create_index(op.f("ix_tournamentteam_team_id"), "tournamentteam", ["team_id"], unique=False)

    if "match" not in tables:
        op.create_table(
            "match",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("tournament_id", sa.Integer(), nullable=False),
            sa.Column("home_team_id", sa.Integer(), nullable=False),
            sa.Column("away_team_id", sa.Integer(), nullable=False),
            sa.Column("round_number", sa.Integer(), nullable=False),
            sa.Column("scheduled_date", sa.Date(), nullable=True),
            sa.Column("scheduled_time", sa.Time(), nullable=True),
            sa.Column("home_score", sa.Integer(), nullable=True),
            sa.Column("away_score", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
            sa.ForeignKeyConstraint(["home_team_id"], ["team.id"]),
            sa.ForeignKeyConstraint(["away_team_id"], ["team.id"]),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint(
                "tournament_id", "home_team_id", "away_team_id", name="uq_match_tournament_home_away"
            ),
        )
        op.create_index(op.f("ix_match_tournament_id"), "match", ["tournament_id"], unique=False)
        op.create_index(op.f("ix_match_round_number"), "match", ["round_number"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_match_round_number"), table_name="match")
    op.drop_index(op.f("ix_match_tournament_id"), table_name="match")
    op.drop_table("match")
    op.drop_index(op.f("ix_tournamentteam_team_id"), table_name="tournamentteam")
    op.drop_index(op.f("ix_tournamentteam_tournament_id"), table_name="tournamentteam")
    op.drop_table("tournamentteam")
    op.drop_table("team")
    op.drop_index(op.f("ix_tournament_organizer_id"), table_name="tournament")
    op.drop_table("tournament")
