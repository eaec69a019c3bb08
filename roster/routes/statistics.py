from fastapi import APIRouter, Depends

from roster.models.game_statistics import (
    GameStatisticCreate,
    GameStatisticRead,
    GameStatisticUpdate,
)
from roster.routes.deps import get_actor_id, get_game_statistic_service
from roster.routes.responses import unwrap
from roster.services.game_statistic_service import GameStatisticService

router = APIRouter(tags=["statistics"])


@router.post("/statistics", response_model=GameStatisticRead, status_code=201)
async def add_statistic(
    payload: GameStatisticCreate,
    actor_id: str = Depends(get_actor_id),
    service: GameStatisticService = Depends(get_game_statistic_service),
) -> GameStatisticRead:
    return unwrap(await service.add_statistic(payload, actor_id))


@router.get("/statistics/{game_statistic_id}", response_model=GameStatisticRead)
async def get_statistic(
    game_statistic_id: int,
    service: GameStatisticService = Depends(get_game_statistic_service),
) -> GameStatisticRead:
    return unwrap(await service.get_statistic_by_id(game_statistic_id))


@router.put("/statistics/{game_statistic_id}", response_model=GameStatisticRead)
async def update_statistic(
    game_statistic_id: int,
    payload: GameStatisticUpdate,
    actor_id: str = Depends(get_actor_id),
    service: GameStatisticService = Depends(get_game_statistic_service),
) -> GameStatisticRead:
    return unwrap(await service.update_statistic(game_statistic_id, payload, actor_id))


@router.delete("/statistics/{game_statistic_id}", response_model=bool)
async def delete_statistic(
    game_statistic_id: int,
    service: GameStatisticService = Depends(get_game_statistic_service),
) -> bool:
    return unwrap(await service.delete_statistic(game_statistic_id))
