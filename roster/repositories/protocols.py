"""Storage contracts consumed by the domain services.

Both the SQL and in-memory implementations satisfy these protocols. Reads
return copies the caller may mutate freely; writes raise `RepositoryError`
(or a subclass) on storage failures and re-raise `asyncio.CancelledError`.
"""

from datetime import date
from typing import Optional, Protocol

from roster.models.game_statistics import AggregateResult, GameStatistic
from roster.models.players import Player
from roster.models.team_assignments import TeamAssignment


class PlayerRepository(Protocol):
    async def get_all(self) -> list[Player]: ...

    async def get_by_id(self, player_id: int) -> Optional[Player]: ...

    async def add(self, player: Player) -> Player: ...

    async def update(self, player: Player) -> Player: ...

    async def delete(self, player_id: int) -> bool: ...

    async def exists(self, player_id: int) -> bool: ...


class TeamAssignmentRepository(Protocol):
    async def get_all_by_player(
        self, player_id: int, include_inactive: bool = False
    ) -> list[TeamAssignment]: ...

    async def get_active_by_player(self, player_id: int) -> list[TeamAssignment]: ...

    async def get_by_id(self, team_assignment_id: int) -> Optional[TeamAssignment]: ...

    async def add(self, assignment: TeamAssignment) -> TeamAssignment: ...

    async def update(self, assignment: TeamAssignment) -> TeamAssignment: ...

    async def delete(self, team_assignment_id: int) -> bool: ...

    async def exists(self, team_assignment_id: int) -> bool: ...

    async def has_active_duplicate(
        self,
        player_id: int,
        team_name: str,
        championship_name: str,
        exclude_id: Optional[int] = None,
    ) -> bool: ...


class GameStatisticRepository(Protocol):
    async def get_all_by_player(self, player_id: int) -> list[GameStatistic]: ...

    async def get_all_by_assignment(self, team_assignment_id: int) -> list[GameStatistic]: ...

    async def get_by_date_range(
        self, player_id: int, start_date: date, end_date: date
    ) -> list[GameStatistic]: ...

    async def get_by_id(self, game_statistic_id: int) -> Optional[GameStatistic]: ...

    async def add(self, statistic: GameStatistic) -> GameStatistic: ...

    async def update(self, statistic: GameStatistic) -> GameStatistic: ...

    async def delete(self, game_statistic_id: int) -> bool: ...

    async def exists(self, game_statistic_id: int) -> bool: ...

    async def get_aggregates(
        self, player_id: int, team_assignment_id: Optional[int] = None
    ) -> AggregateResult: ...
