"""FastAPI dependencies wiring request sessions to repositories and services.

Tests swap the repository providers for in-memory ones through
`app.dependency_overrides`.
"""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from roster.repositories.protocols import (
    GameStatisticRepository,
    PlayerRepository,
    TeamAssignmentRepository,
)
from roster.repositories.sql import (
    SqlGameStatisticRepository,
    SqlPlayerRepository,
    SqlTeamAssignmentRepository,
)
from roster.services.game_statistic_service import GameStatisticService
from roster.services.player_service import PlayerService
from roster.services.team_assignment_service import TeamAssignmentService
from roster.utils.db_async import get_session


def get_player_repository(db: AsyncSession = Depends(get_session)) -> PlayerRepository:
    return SqlPlayerRepository(db)


def get_team_assignment_repository(
    db: AsyncSession = Depends(get_session),
) -> TeamAssignmentRepository:
    return SqlTeamAssignmentRepository(db)


def get_game_statistic_repository(
    db: AsyncSession = Depends(get_session),
) -> GameStatisticRepository:
    return SqlGameStatisticRepository(db)


def get_player_service(
    players: PlayerRepository = Depends(get_player_repository),
) -> PlayerService:
    return PlayerService(players)


def get_team_assignment_service(
    assignments: TeamAssignmentRepository = Depends(get_team_assignment_repository),
    players: PlayerRepository = Depends(get_player_repository),
) -> TeamAssignmentService:
    return TeamAssignmentService(assignments, players)


def get_game_statistic_service(
    statistics: GameStatisticRepository = Depends(get_game_statistic_repository),
    assignments: TeamAssignmentRepository = Depends(get_team_assignment_repository),
) -> GameStatisticService:
    return GameStatisticService(statistics, assignments)


def get_actor_id(x_actor_id: str | None = Header(default=None)) -> str:
    """Opaque caller identity used only for audit stamping."""
    if x_actor_id is None or not x_actor_id.strip():
        raise HTTPException(status_code=400, detail="X-Actor-Id header is required")
    return x_actor_id.strip()
