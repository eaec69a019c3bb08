"""Per-game statistic records and the aggregate summary computed over them."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from sqlmodel import SQLModel

from roster.utils.dates import utc_now


@dataclass
class GameStatistic:
    """One player's performance in one game, scoped to a team assignment.

    `team_name` and `championship_name` are read-only copies of the owning
    assignment's values, filled in by repositories on reads.
    """

    team_assignment_id: int
    game_date: date
    minutes_played: int
    is_starter: bool
    jersey_number: int
    goals: int
    assists: int
    created_by: str
    id: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    row_version: int = 1
    team_name: Optional[str] = field(default=None, compare=False)
    championship_name: Optional[str] = field(default=None, compare=False)

    def touch(self, actor_id: str) -> None:
        if not actor_id or not actor_id.strip():
            raise ValueError("Actor ID cannot be empty.")
        self.updated_at = utc_now()
        self.updated_by = actor_id


@dataclass(frozen=True)
class AggregateResult:
    game_count: int = 0
    total_goals: int = 0
    total_assists: int = 0
    total_minutes: int = 0
    average_goals: float = 0.0
    average_assists: float = 0.0
    average_minutes: float = 0.0

    @classmethod
    def empty(cls) -> "AggregateResult":
        return cls()

    @classmethod
    def from_totals(
        cls,
        game_count: int,
        total_goals: int,
        total_assists: int,
        total_minutes: int,
    ) -> "AggregateResult":
        """Derive averages from totals; averages are 0.0 when there are no games."""
        if game_count <= 0:
            return cls.empty()
        return cls(
            game_count=game_count,
            total_goals=total_goals,
            total_assists=total_assists,
            total_minutes=total_minutes,
            average_goals=total_goals / game_count,
            average_assists=total_assists / game_count,
            average_minutes=total_minutes / game_count,
        )


def aggregate_statistics(statistics: Iterable[GameStatistic]) -> AggregateResult:
    """Summarize statistics in a single pass."""
    count = goals = assists = minutes = 0
    for stat in statistics:
        count += 1
        goals += stat.goals
        assists += stat.assists
        minutes += stat.minutes_played
    return AggregateResult.from_totals(count, goals, assists, minutes)


class GameStatisticCreate(SQLModel):
    team_assignment_id: Optional[int] = None
    game_date: Optional[date] = None
    minutes_played: Optional[int] = None
    is_starter: bool = False
    jersey_number: Optional[int] = None
    goals: Optional[int] = None
    assists: Optional[int] = None

    def to_entity(self, actor_id: str) -> GameStatistic:
        assert self.team_assignment_id is not None and self.game_date is not None
        assert self.minutes_played is not None and self.jersey_number is not None
        assert self.goals is not None and self.assists is not None
        return GameStatistic(
            team_assignment_id=self.team_assignment_id,
            game_date=self.game_date,
            minutes_played=self.minutes_played,
            is_starter=self.is_starter,
            jersey_number=self.jersey_number,
            goals=self.goals,
            assists=self.assists,
            created_by=actor_id,
        )


class GameStatisticUpdate(GameStatisticCreate):
    game_statistic_id: int

    def apply_to(self, statistic: GameStatistic, actor_id: str) -> GameStatistic:
        assert self.team_assignment_id is not None and self.game_date is not None
        assert self.minutes_played is not None and self.jersey_number is not None
        assert self.goals is not None and self.assists is not None
        statistic.touch(actor_id)
        statistic.team_assignment_id = self.team_assignment_id
        statistic.game_date = self.game_date
        statistic.minutes_played = self.minutes_played
        statistic.is_starter = self.is_starter
        statistic.jersey_number = self.jersey_number
        statistic.goals = self.goals
        statistic.assists = self.assists
        return statistic


class GameStatisticRead(SQLModel):
    id: int
    team_assignment_id: int
    team_name: Optional[str] = None
    championship_name: Optional[str] = None
    game_date: date
    minutes_played: int
    is_starter: bool
    jersey_number: int
    goals: int
    assists: int
    created_at: datetime
    created_by: str
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    @classmethod
    def from_entity(cls, statistic: GameStatistic) -> "GameStatisticRead":
        assert statistic.id is not None
        return cls(
            id=statistic.id,
            team_assignment_id=statistic.team_assignment_id,
            team_name=statistic.team_name.strip() if statistic.team_name else None,
            championship_name=(
                statistic.championship_name.strip() if statistic.championship_name else None
            ),
            game_date=statistic.game_date,
            minutes_played=statistic.minutes_played,
            is_starter=statistic.is_starter,
            jersey_number=statistic.jersey_number,
            goals=statistic.goals,
            assists=statistic.assists,
            created_at=statistic.created_at,
            created_by=statistic.created_by,
            updated_at=statistic.updated_at,
            updated_by=statistic.updated_by,
        )
