"""Initial roster schema: players, team assignments, game statistics.

Revision ID: 20251018_000001
Revises:
Create Date: 2025-10-18 00:00:01
"""

from alembic import op  # type: ignore[attr-defined]
import sqlalchemy as sa

revision = "20251018_000001"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("created_by", sa.String(length=450), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("updated_by", sa.String(length=450), nullable=True),
        sa.Column("row_version", sa.Integer(), nullable=False, server_default="1"),
    ]


def upgrade() -> None:
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=450), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(length=50), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_players_user_id", "players", ["user_id"], unique=False)
    op.create_index("ix_players_name", "players", ["name"], unique=False)

    op.create_table(
        "team_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "player_id",
            sa.Integer(),
            sa.ForeignKey("players.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("team_name", sa.String(length=200), nullable=False),
        sa.Column("championship_name", sa.String(length=200), nullable=False),
        sa.Column("joined_date", sa.Date(), nullable=False),
        sa.Column("left_date", sa.Date(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_team_assignments_player_id", "team_assignments", ["player_id"])
    op.create_index("ix_team_assignments_joined_date", "team_assignments", ["joined_date"])
    op.create_index("ix_team_assignments_left_date", "team_assignments", ["left_date"])
    op.create_index(
        "ix_team_assignments_player_left", "team_assignments", ["player_id", "left_date"]
    )
    # One active assignment per player, team and championship.
    op.create_index(
        "uq_team_assignments_active",
        "team_assignments",
        ["player_id", "team_name", "championship_name"],
        unique=True,
        postgresql_where=sa.text("left_date IS NULL"),
    )

    op.create_table(
        "game_statistics",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "team_assignment_id",
            sa.Integer(),
            sa.ForeignKey("team_assignments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("game_date", sa.Date(), nullable=False),
        sa.Column("minutes_played", sa.Integer(), nullable=False),
        sa.Column("is_starter", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("jersey_number", sa.Integer(), nullable=False),
        sa.Column("goals", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("assists", sa.Integer(), nullable=False, server_default="0"),
        *_audit_columns(),
        sa.CheckConstraint(
            "minutes_played >= 0 AND minutes_played <= 120",
            name="ck_game_statistics_minutes_played",
        ),
        sa.CheckConstraint(
            "jersey_number >= 1 AND jersey_number <= 99",
            name="ck_game_statistics_jersey_number",
        ),
        sa.CheckConstraint("goals >= 0", name="ck_game_statistics_goals"),
        sa.CheckConstraint("assists >= 0", name="ck_game_statistics_assists"),
    )
    op.create_index(
        "ix_game_statistics_team_assignment_id", "game_statistics", ["team_assignment_id"]
    )
    op.create_index("ix_game_statistics_game_date", "game_statistics", ["game_date"])


def downgrade() -> None:
    op.drop_table("game_statistics")
    op.execute(sa.text("DROP INDEX IF EXISTS uq_team_assignments_active"))
    op.drop_table("team_assignments")
    op.drop_table("players")
