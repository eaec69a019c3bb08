from typing import List

from fastapi import APIRouter, Depends

from roster.models.game_statistics import GameStatisticRead
from roster.models.team_assignments import (
    TeamAssignmentCreate,
    TeamAssignmentLeave,
    TeamAssignmentRead,
    TeamAssignmentUpdate,
)
from roster.routes.deps import (
    get_actor_id,
    get_game_statistic_service,
    get_team_assignment_service,
)
from roster.routes.responses import unwrap
from roster.services.game_statistic_service import GameStatisticService
from roster.services.team_assignment_service import TeamAssignmentService

router = APIRouter(tags=["team-assignments"])


@router.post("/team-assignments", response_model=TeamAssignmentRead, status_code=201)
async def add_player_to_team(
    payload: TeamAssignmentCreate,
    actor_id: str = Depends(get_actor_id),
    service: TeamAssignmentService = Depends(get_team_assignment_service),
) -> TeamAssignmentRead:
    return unwrap(await service.add_player_to_team(payload, actor_id))


@router.get("/team-assignments/{team_assignment_id}", response_model=TeamAssignmentRead)
async def get_assignment(
    team_assignment_id: int,
    service: TeamAssignmentService = Depends(get_team_assignment_service),
) -> TeamAssignmentRead:
    return unwrap(await service.get_assignment_by_id(team_assignment_id))


@router.put("/team-assignments/{team_assignment_id}", response_model=TeamAssignmentRead)
async def update_assignment(
    team_assignment_id: int,
    payload: TeamAssignmentUpdate,
    actor_id: str = Depends(get_actor_id),
    service: TeamAssignmentService = Depends(get_team_assignment_service),
) -> TeamAssignmentRead:
    return unwrap(await service.update_assignment(team_assignment_id, payload, actor_id))


@router.post("/team-assignments/{team_assignment_id}/leave", response_model=TeamAssignmentRead)
async def remove_player_from_team(
    team_assignment_id: int,
    payload: TeamAssignmentLeave,
    actor_id: str = Depends(get_actor_id),
    service: TeamAssignmentService = Depends(get_team_assignment_service),
) -> TeamAssignmentRead:
    """Mark the player as having left; the assignment is kept as history."""
    return unwrap(
        await service.remove_player_from_team(team_assignment_id, payload.left_date, actor_id)
    )


@router.delete("/team-assignments/{team_assignment_id}", response_model=bool)
async def delete_assignment(
    team_assignment_id: int,
    service: TeamAssignmentService = Depends(get_team_assignment_service),
) -> bool:
    return unwrap(await service.delete_assignment(team_assignment_id))


@router.get(
    "/team-assignments/{team_assignment_id}/statistics",
    response_model=List[GameStatisticRead],
)
async def list_assignment_statistics(
    team_assignment_id: int,
    service: GameStatisticService = Depends(get_game_statistic_service),
) -> List[GameStatisticRead]:
    return unwrap(await service.get_statistics_by_assignment(team_assignment_id))
