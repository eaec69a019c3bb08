from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from roster.models.game_statistics import AggregateResult, GameStatisticRead
from roster.models.players import PlayerCreate, PlayerRead, PlayerUpdate
from roster.models.team_assignments import TeamAssignmentRead
from roster.routes.deps import (
    get_actor_id,
    get_game_statistic_service,
    get_player_service,
    get_team_assignment_service,
)
from roster.routes.responses import unwrap
from roster.services.game_statistic_service import GameStatisticService
from roster.services.player_service import PlayerService
from roster.services.team_assignment_service import TeamAssignmentService

router = APIRouter(tags=["players"])


@router.get("/players", response_model=List[PlayerRead])
async def list_players(
    service: PlayerService = Depends(get_player_service),
) -> List[PlayerRead]:
    """List all players ordered by name."""
    return unwrap(await service.get_all_players())


@router.post("/players", response_model=PlayerRead, status_code=201)
async def create_player(
    payload: PlayerCreate,
    actor_id: str = Depends(get_actor_id),
    service: PlayerService = Depends(get_player_service),
) -> PlayerRead:
    return unwrap(await service.create_player(payload, actor_id))


@router.get("/players/{player_id}", response_model=PlayerRead)
async def get_player(
    player_id: int,
    service: PlayerService = Depends(get_player_service),
) -> PlayerRead:
    return unwrap(await service.get_player_by_id(player_id))


@router.put("/players/{player_id}", response_model=PlayerRead)
async def update_player(
    player_id: int,
    payload: PlayerUpdate,
    actor_id: str = Depends(get_actor_id),
    service: PlayerService = Depends(get_player_service),
) -> PlayerRead:
    return unwrap(await service.update_player(player_id, payload, actor_id))


@router.delete("/players/{player_id}", response_model=bool)
async def delete_player(
    player_id: int,
    service: PlayerService = Depends(get_player_service),
) -> bool:
    """Delete a player with all of their assignments and statistics."""
    return unwrap(await service.delete_player(player_id))


@router.get("/players/{player_id}/teams", response_model=List[TeamAssignmentRead])
async def list_player_teams(
    player_id: int,
    include_inactive: bool = Query(False, description="Include teams the player has left"),
    service: TeamAssignmentService = Depends(get_team_assignment_service),
) -> List[TeamAssignmentRead]:
    return unwrap(await service.get_teams_by_player(player_id, include_inactive))


@router.get("/players/{player_id}/teams/active", response_model=List[TeamAssignmentRead])
async def list_player_active_teams(
    player_id: int,
    service: TeamAssignmentService = Depends(get_team_assignment_service),
) -> List[TeamAssignmentRead]:
    return unwrap(await service.get_active_teams_by_player(player_id))


@router.get("/players/{player_id}/statistics", response_model=List[GameStatisticRead])
async def list_player_statistics(
    player_id: int,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: GameStatisticService = Depends(get_game_statistic_service),
) -> List[GameStatisticRead]:
    """Player statistics, latest game first, optionally within [start_date, end_date]."""
    if start_date is None and end_date is None:
        return unwrap(await service.get_statistics_by_player(player_id))
    if start_date is None or end_date is None:
        raise HTTPException(
            status_code=400, detail="start_date and end_date must be provided together"
        )
    try:
        result = await service.get_statistics_by_date_range(player_id, start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return unwrap(result)


@router.get("/players/{player_id}/aggregates", response_model=AggregateResult)
async def get_player_aggregates(
    player_id: int,
    team_assignment_id: Optional[int] = Query(None),
    service: GameStatisticService = Depends(get_game_statistic_service),
) -> AggregateResult:
    return unwrap(await service.get_aggregates(player_id, team_assignment_id))
