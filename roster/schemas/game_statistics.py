from datetime import date, datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel

from roster.utils.dates import utc_now


class GameStatisticRecord(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "game_statistics"
    __table_args__ = (
        CheckConstraint(
            "minutes_played >= 0 AND minutes_played <= 120",
            name="ck_game_statistics_minutes_played",
        ),
        CheckConstraint(
            "jersey_number >= 1 AND jersey_number <= 99",
            name="ck_game_statistics_jersey_number",
        ),
        CheckConstraint("goals >= 0", name="ck_game_statistics_goals"),
        CheckConstraint("assists >= 0", name="ck_game_statistics_assists"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    team_assignment_id: int = Field(
        foreign_key="team_assignments.id", index=True, ondelete="CASCADE"
    )
    game_date: date = Field(index=True)
    minutes_played: int
    is_starter: bool = Field(default=False)
    jersey_number: int
    goals: int = Field(default=0)
    assists: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime())
    created_by: str = Field(max_length=450)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
    updated_by: Optional[str] = Field(default=None, max_length=450)
    row_version: int = Field(default=1)
