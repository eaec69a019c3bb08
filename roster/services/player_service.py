"""Player service: CRUD over players with validation and audit stamping.

Every public coroutine returns a `ServiceResult`; storage faults are logged
and folded into its failure channels. Only argument-contract violations
(missing dto, blank actor id) raise.
"""

import logging

from roster.models.players import PlayerCreate, PlayerRead, PlayerUpdate
from roster.models.results import ErrorKind, ServiceResult, ValidationResult
from roster.repositories.errors import RepositoryError
from roster.repositories.protocols import PlayerRepository
from roster.services.common import (
    delete_not_applied,
    from_repository_error,
    require_actor,
    require_dto,
)
from roster.validators.players import validate_create_player, validate_update_player

logger = logging.getLogger(__name__)


def _not_found(player_id: int) -> str:
    return f"Player with ID {player_id} could not be found."


class PlayerService:
    def __init__(self, players: PlayerRepository) -> None:
        self.players = players

    async def get_all_players(self) -> ServiceResult[list[PlayerRead]]:
        """All players ordered by name."""
        try:
            players = await self.players.get_all()
        except RepositoryError as exc:
            return from_repository_error(exc, "Unable to load players. Please try again.")
        except Exception:
            logger.exception("Error loading players")
            return ServiceResult.fail("Unable to load players. Please try again.")
        logger.info(f"Loaded {len(players)} players")
        return ServiceResult.ok([PlayerRead.from_entity(p) for p in players])

    async def get_player_by_id(self, player_id: int) -> ServiceResult[PlayerRead]:
        try:
            player = await self.players.get_by_id(player_id)
        except RepositoryError as exc:
            return from_repository_error(exc, "Unable to load player. Please try again.")
        except Exception:
            logger.exception(f"Error loading player {player_id}")
            return ServiceResult.fail("Unable to load player. Please try again.")
        if player is None:
            logger.warning(f"Player {player_id} not found")
            return ServiceResult.not_found(_not_found(player_id))
        return ServiceResult.ok(PlayerRead.from_entity(player))

    async def create_player(self, dto: PlayerCreate, actor_id: str) -> ServiceResult[PlayerRead]:
        require_dto(dto, "dto")
        require_actor(actor_id)
        logger.info(f"Creating player by user {actor_id}")

        validation = validate_create_player(dto)
        if not validation.is_valid:
            logger.warning(f"Validation failed creating player: {sorted(validation.errors)}")
            return ServiceResult.validation_failed(validation)

        try:
            created = await self.players.add(dto.to_entity(actor_id))
        except RepositoryError as exc:
            return from_repository_error(exc, "Unable to save player. Please try again.")
        except Exception:
            logger.exception("Error creating player")
            return ServiceResult.fail("Unable to save player. Please try again.")

        logger.info(f"Created player {created.id}")
        return ServiceResult.ok(PlayerRead.from_entity(created))

    async def update_player(
        self, player_id: int, dto: PlayerUpdate, actor_id: str
    ) -> ServiceResult[PlayerRead]:
        require_dto(dto, "dto")
        require_actor(actor_id)
        logger.info(f"Updating player {player_id} by user {actor_id}")

        if dto.id != player_id:
            logger.warning(f"Player ID mismatch: path {player_id}, body {dto.id}")
            return ServiceResult.fail("Player ID mismatch.", kind=ErrorKind.MISMATCH)

        try:
            existing = await self.players.get_by_id(player_id)
            if existing is None:
                logger.warning(f"Player {player_id} not found for update")
                return ServiceResult.not_found(_not_found(player_id))

            validation = validate_update_player(dto)
            if not validation.is_valid:
                logger.warning(f"Validation failed updating player {player_id}")
                return ServiceResult.validation_failed(validation)

            updated = await self.players.update(dto.apply_to(existing, actor_id))
        except RepositoryError as exc:
            return from_repository_error(exc, "Unable to save player. Please try again.")
        except Exception:
            logger.exception(f"Error updating player {player_id}")
            return ServiceResult.fail("Unable to save player. Please try again.")

        logger.info(f"Updated player {player_id}")
        return ServiceResult.ok(PlayerRead.from_entity(updated))

    async def delete_player(self, player_id: int) -> ServiceResult[bool]:
        """Delete a player along with their assignments and statistics."""
        logger.info(f"Deleting player {player_id}")
        try:
            if not await self.players.exists(player_id):
                logger.warning(f"Player {player_id} not found for deletion")
                return ServiceResult.not_found(_not_found(player_id))
            deleted = await self.players.delete(player_id)
        except RepositoryError as exc:
            return from_repository_error(exc, "Unable to delete player. Please try again.")
        except Exception:
            logger.exception(f"Error deleting player {player_id}")
            return ServiceResult.fail("Unable to delete player. Please try again.")

        if not deleted:
            logger.warning(f"Player {player_id} was not deleted")
            return delete_not_applied("Unable to delete player. Please try again.")
        logger.info(f"Deleted player {player_id}")
        return ServiceResult.ok(True)

    def validate_player(self, dto: PlayerCreate | PlayerUpdate) -> ValidationResult:
        require_dto(dto, "dto")
        if isinstance(dto, PlayerUpdate):
            return validate_update_player(dto)
        return validate_create_player(dto)
