"""Team assignment table.

At most one active row (left_date IS NULL) may exist per
(player_id, team_name, championship_name); the partial unique index enforces
it even when two writers pass the application-level check at once.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import DateTime, Index, text
from sqlmodel import Field, SQLModel

from roster.models.fields import MAX_CHAMPIONSHIP_NAME_LENGTH, MAX_TEAM_NAME_LENGTH
from roster.utils.dates import utc_now

ACTIVE_ASSIGNMENT_INDEX = "uq_team_assignments_active"


class TeamAssignmentRecord(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "team_assignments"
    __table_args__ = (
        Index("ix_team_assignments_player_left", "player_id", "left_date"),
        Index(
            ACTIVE_ASSIGNMENT_INDEX,
            "player_id",
            "team_name",
            "championship_name",
            unique=True,
            postgresql_where=text("left_date IS NULL"),
            sqlite_where=text("left_date IS NULL"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    player_id: int = Field(foreign_key="players.id", index=True, ondelete="CASCADE")
    team_name: str = Field(max_length=MAX_TEAM_NAME_LENGTH)
    championship_name: str = Field(max_length=MAX_CHAMPIONSHIP_NAME_LENGTH)
    joined_date: date = Field(index=True)
    left_date: Optional[date] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime())
    created_by: str = Field(max_length=450)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
    updated_by: Optional[str] = Field(default=None, max_length=450)
    row_version: int = Field(default=1)
