"""Game statistic service: per-game records plus aggregate summaries."""

import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Optional

from roster.models.game_statistics import (
    AggregateResult,
    GameStatistic,
    GameStatisticCreate,
    GameStatisticRead,
    GameStatisticUpdate,
)
from roster.models.results import ErrorKind, ServiceResult, ValidationResult
from roster.repositories.errors import RepositoryError
from roster.repositories.protocols import GameStatisticRepository, TeamAssignmentRepository
from roster.services.common import (
    delete_not_applied,
    from_repository_error,
    require_actor,
    require_dto,
)
from roster.validators.game_statistics import (
    validate_create_game_statistic,
    validate_game_statistic,
    validate_update_game_statistic,
)

logger = logging.getLogger(__name__)

LOAD_FAILED = "Unable to load statistic. Please try again."
SAVE_FAILED = "Unable to save statistic. Please try again."
DELETE_FAILED = "Unable to delete statistic. Please try again."
AGGREGATES_FAILED = "Unable to load aggregates. Please try again."


def _not_found(game_statistic_id: int) -> str:
    return f"Statistic with ID {game_statistic_id} could not be found."


def _assignment_not_found(team_assignment_id: int) -> str:
    return f"Team assignment with ID {team_assignment_id} could not be found."


class GameStatisticService:
    def __init__(
        self,
        statistics: GameStatisticRepository,
        assignments: TeamAssignmentRepository,
    ) -> None:
        self.statistics = statistics
        self.assignments = assignments

    async def _list(
        self, label: str, load: Callable[[], Awaitable[list[GameStatistic]]]
    ) -> ServiceResult[list[GameStatisticRead]]:
        try:
            found = await load()
        except RepositoryError as exc:
            return from_repository_error(exc, LOAD_FAILED)
        except Exception:
            logger.exception(f"Error loading statistics for {label}")
            return ServiceResult.fail(LOAD_FAILED)
        logger.info(f"Loaded {len(found)} statistics for {label}")
        return ServiceResult.ok([GameStatisticRead.from_entity(s) for s in found])

    async def get_statistics_by_player(
        self, player_id: int
    ) -> ServiceResult[list[GameStatisticRead]]:
        """Statistics across all of a player's assignments, latest game first."""
        return await self._list(
            f"player {player_id}", lambda: self.statistics.get_all_by_player(player_id)
        )

    async def get_statistics_by_assignment(
        self, team_assignment_id: int
    ) -> ServiceResult[list[GameStatisticRead]]:
        return await self._list(
            f"team assignment {team_assignment_id}",
            lambda: self.statistics.get_all_by_assignment(team_assignment_id),
        )

    async def get_statistics_by_date_range(
        self, player_id: int, start_date: date, end_date: date
    ) -> ServiceResult[list[GameStatisticRead]]:
        """Statistics with start_date <= game_date <= end_date."""
        if start_date > end_date:
            raise ValueError("start_date must be on or before end_date.")
        return await self._list(
            f"player {player_id} between {start_date} and {end_date}",
            lambda: self.statistics.get_by_date_range(player_id, start_date, end_date),
        )

    async def get_statistic_by_id(self, game_statistic_id: int) -> ServiceResult[GameStatisticRead]:
        try:
            statistic = await self.statistics.get_by_id(game_statistic_id)
        except RepositoryError as exc:
            return from_repository_error(exc, LOAD_FAILED)
        except Exception:
            logger.exception(f"Error loading statistic {game_statistic_id}")
            return ServiceResult.fail(LOAD_FAILED)
        if statistic is None:
            logger.warning(f"Statistic {game_statistic_id} not found")
            return ServiceResult.not_found(_not_found(game_statistic_id))
        return ServiceResult.ok(GameStatisticRead.from_entity(statistic))

    async def add_statistic(
        self, dto: GameStatisticCreate, actor_id: str
    ) -> ServiceResult[GameStatisticRead]:
        require_dto(dto, "dto")
        require_actor(actor_id)
        logger.info(
            f"Adding statistic for team assignment {dto.team_assignment_id} by user {actor_id}"
        )

        validation = validate_create_game_statistic(dto)
        if not validation.is_valid:
            logger.warning(f"Validation failed adding statistic: {sorted(validation.errors)}")
            return ServiceResult.validation_failed(validation)
        assert dto.team_assignment_id is not None

        try:
            if not await self.assignments.exists(dto.team_assignment_id):
                logger.warning(f"Team assignment {dto.team_assignment_id} not found for statistic")
                return ServiceResult.not_found(_assignment_not_found(dto.team_assignment_id))
            created = await self.statistics.add(dto.to_entity(actor_id))
        except RepositoryError as exc:
            return from_repository_error(exc, SAVE_FAILED)
        except Exception:
            logger.exception("Error adding statistic")
            return ServiceResult.fail(SAVE_FAILED)

        logger.info(f"Created statistic {created.id}")
        return ServiceResult.ok(GameStatisticRead.from_entity(created))

    async def update_statistic(
        self, game_statistic_id: int, dto: GameStatisticUpdate, actor_id: str
    ) -> ServiceResult[GameStatisticRead]:
        require_dto(dto, "dto")
        require_actor(actor_id)
        logger.info(f"Updating statistic {game_statistic_id} by user {actor_id}")

        if dto.game_statistic_id != game_statistic_id:
            logger.warning(
                f"Statistic ID mismatch: path {game_statistic_id}, body {dto.game_statistic_id}"
            )
            return ServiceResult.fail("Statistic ID mismatch.", kind=ErrorKind.MISMATCH)

        try:
            existing = await self.statistics.get_by_id(game_statistic_id)
            if existing is None:
                logger.warning(f"Statistic {game_statistic_id} not found for update")
                return ServiceResult.not_found(_not_found(game_statistic_id))

            new_assignment_id = dto.team_assignment_id
            if (
                new_assignment_id is not None
                and new_assignment_id > 0
                and new_assignment_id != existing.team_assignment_id
                and not await self.assignments.exists(new_assignment_id)
            ):
                logger.warning(f"Team assignment {new_assignment_id} not found for statistic")
                return ServiceResult.not_found(_assignment_not_found(new_assignment_id))

            validation = validate_update_game_statistic(dto)
            if not validation.is_valid:
                logger.warning(f"Validation failed updating statistic {game_statistic_id}")
                return ServiceResult.validation_failed(validation)

            changed = dto.apply_to(existing, actor_id)
            revalidated = validate_game_statistic(changed)
            if not revalidated.is_valid:
                logger.warning(f"Statistic {game_statistic_id} invalid after applying update")
                return ServiceResult.validation_failed(revalidated)

            updated = await self.statistics.update(changed)
        except RepositoryError as exc:
            return from_repository_error(exc, SAVE_FAILED)
        except Exception:
            logger.exception(f"Error updating statistic {game_statistic_id}")
            return ServiceResult.fail(SAVE_FAILED)

        logger.info(f"Updated statistic {game_statistic_id}")
        return ServiceResult.ok(GameStatisticRead.from_entity(updated))

    async def delete_statistic(self, game_statistic_id: int) -> ServiceResult[bool]:
        """Delete one statistic.

        A row that vanishes between the existence check and the delete is a
        benign race: the result carries ``data=False`` with a failure message
        rather than an error.
        """
        logger.info(f"Deleting statistic {game_statistic_id}")
        try:
            if not await self.statistics.exists(game_statistic_id):
                logger.warning(f"Statistic {game_statistic_id} not found for deletion")
                return ServiceResult.not_found(_not_found(game_statistic_id))
            deleted = await self.statistics.delete(game_statistic_id)
        except RepositoryError as exc:
            return from_repository_error(exc, DELETE_FAILED)
        except Exception:
            logger.exception(f"Error deleting statistic {game_statistic_id}")
            return ServiceResult.fail(DELETE_FAILED)

        if not deleted:
            logger.warning(f"Statistic {game_statistic_id} was not deleted")
            return delete_not_applied(DELETE_FAILED)
        logger.info(f"Deleted statistic {game_statistic_id}")
        return ServiceResult.ok(True)

    async def get_aggregates(
        self, player_id: int, team_assignment_id: Optional[int] = None
    ) -> ServiceResult[AggregateResult]:
        """Totals and per-game averages; all zeros when there are no games."""
        try:
            aggregates = await self.statistics.get_aggregates(
                player_id, team_assignment_id=team_assignment_id
            )
        except RepositoryError as exc:
            return from_repository_error(exc, AGGREGATES_FAILED)
        except Exception:
            logger.exception(f"Error computing aggregates for player {player_id}")
            return ServiceResult.fail(AGGREGATES_FAILED)
        return ServiceResult.ok(aggregates)

    def validate_statistic(
        self, dto: GameStatisticCreate | GameStatisticUpdate
    ) -> ValidationResult:
        require_dto(dto, "dto")
        if isinstance(dto, GameStatisticUpdate):
            return validate_update_game_statistic(dto)
        return validate_create_game_statistic(dto)
