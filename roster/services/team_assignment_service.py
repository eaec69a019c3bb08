"""Team assignment service.

Assignments move one way, Active -> Inactive, by recording a left date.
Removing a player from a team is that transition; the row is kept as
history and a re-join creates a new assignment. Hard deletes exist only as
an administrative operation.
"""

import logging
from datetime import date

from roster.models.results import ErrorKind, ServiceResult, ValidationResult
from roster.models.team_assignments import (
    InvalidTransitionError,
    TeamAssignmentCreate,
    TeamAssignmentRead,
    TeamAssignmentUpdate,
)
from roster.repositories.errors import RepositoryError
from roster.repositories.protocols import PlayerRepository, TeamAssignmentRepository
from roster.services.common import (
    DUPLICATE_ASSIGNMENT_MESSAGE,
    delete_not_applied,
    from_repository_error,
    require_actor,
    require_dto,
)
from roster.validators.team_assignments import (
    validate_create_team_assignment,
    validate_left_date,
    validate_team_assignment,
    validate_update_team_assignment,
)

logger = logging.getLogger(__name__)

LOAD_FAILED = "Unable to load team assignment. Please try again."
SAVE_FAILED = "Unable to save team assignment. Please try again."
UPDATE_FAILED = "Unable to update team assignment. Please try again."
DELETE_FAILED = "Unable to delete team assignment. Please try again."


def _not_found(team_assignment_id: int) -> str:
    return f"Team assignment with ID {team_assignment_id} could not be found."


class TeamAssignmentService:
    def __init__(
        self, assignments: TeamAssignmentRepository, players: PlayerRepository
    ) -> None:
        self.assignments = assignments
        self.players = players

    async def get_teams_by_player(
        self, player_id: int, include_inactive: bool = False
    ) -> ServiceResult[list[TeamAssignmentRead]]:
        """Assignments for a player, most recently joined first."""
        try:
            found = await self.assignments.get_all_by_player(
                player_id, include_inactive=include_inactive
            )
        except RepositoryError as exc:
            return from_repository_error(exc, LOAD_FAILED)
        except Exception:
            logger.exception(f"Error loading team assignments for player {player_id}")
            return ServiceResult.fail(LOAD_FAILED)
        return ServiceResult.ok([TeamAssignmentRead.from_entity(a) for a in found])

    async def get_active_teams_by_player(
        self, player_id: int
    ) -> ServiceResult[list[TeamAssignmentRead]]:
        try:
            found = await self.assignments.get_active_by_player(player_id)
        except RepositoryError as exc:
            return from_repository_error(exc, LOAD_FAILED)
        except Exception:
            logger.exception(f"Error loading active team assignments for player {player_id}")
            return ServiceResult.fail(LOAD_FAILED)
        return ServiceResult.ok([TeamAssignmentRead.from_entity(a) for a in found])

    async def get_assignment_by_id(
        self, team_assignment_id: int
    ) -> ServiceResult[TeamAssignmentRead]:
        try:
            assignment = await self.assignments.get_by_id(team_assignment_id)
        except RepositoryError as exc:
            return from_repository_error(exc, LOAD_FAILED)
        except Exception:
            logger.exception(f"Error loading team assignment {team_assignment_id}")
            return ServiceResult.fail(LOAD_FAILED)
        if assignment is None:
            logger.warning(f"Team assignment {team_assignment_id} not found")
            return ServiceResult.not_found(_not_found(team_assignment_id))
        return ServiceResult.ok(TeamAssignmentRead.from_entity(assignment))

    async def add_player_to_team(
        self, dto: TeamAssignmentCreate, actor_id: str
    ) -> ServiceResult[TeamAssignmentRead]:
        """Create an Active assignment unless one already exists for the same team."""
        require_dto(dto, "dto")
        require_actor(actor_id)
        logger.info(
            f"Adding player {dto.player_id} to team {dto.team_name!r} by user {actor_id}"
        )

        validation = validate_create_team_assignment(dto)
        if not validation.is_valid:
            logger.warning(f"Validation failed adding player {dto.player_id} to team")
            return ServiceResult.validation_failed(validation)
        assert dto.player_id is not None
        assert dto.team_name is not None and dto.championship_name is not None

        try:
            if not await self.players.exists(dto.player_id):
                logger.warning(f"Player {dto.player_id} not found when adding to team")
                return ServiceResult.not_found(
                    f"Player with ID {dto.player_id} could not be found."
                )

            if await self.assignments.has_active_duplicate(
                dto.player_id, dto.team_name, dto.championship_name
            ):
                logger.warning(
                    f"Player {dto.player_id} already active on {dto.team_name!r} "
                    f"in {dto.championship_name!r}"
                )
                return ServiceResult.field_error(
                    "DuplicateAssignment", DUPLICATE_ASSIGNMENT_MESSAGE
                )

            created = await self.assignments.add(dto.to_entity(actor_id))
        except RepositoryError as exc:
            return from_repository_error(exc, SAVE_FAILED)
        except Exception:
            logger.exception(f"Error adding player {dto.player_id} to team")
            return ServiceResult.fail(SAVE_FAILED)

        logger.info(f"Created team assignment {created.id} for player {created.player_id}")
        return ServiceResult.ok(TeamAssignmentRead.from_entity(created))

    async def update_assignment(
        self, team_assignment_id: int, dto: TeamAssignmentUpdate, actor_id: str
    ) -> ServiceResult[TeamAssignmentRead]:
        require_dto(dto, "dto")
        require_actor(actor_id)
        logger.info(f"Updating team assignment {team_assignment_id} by user {actor_id}")

        if dto.team_assignment_id != team_assignment_id:
            logger.warning(
                f"Team assignment ID mismatch: path {team_assignment_id}, "
                f"body {dto.team_assignment_id}"
            )
            return ServiceResult.fail("Team assignment ID mismatch.", kind=ErrorKind.MISMATCH)

        try:
            existing = await self.assignments.get_by_id(team_assignment_id)
            if existing is None:
                logger.warning(f"Team assignment {team_assignment_id} not found for update")
                return ServiceResult.not_found(_not_found(team_assignment_id))

            validation = validate_update_team_assignment(dto)
            if not validation.is_valid:
                logger.warning(f"Validation failed updating team assignment {team_assignment_id}")
                return ServiceResult.validation_failed(validation)
            assert dto.team_name is not None and dto.championship_name is not None
            assert dto.joined_date is not None

            target_changed = (
                dto.team_name.strip() != existing.team_name
                or dto.championship_name.strip() != existing.championship_name
            )
            if dto.left_date is None and target_changed:
                if await self.assignments.has_active_duplicate(
                    existing.player_id,
                    dto.team_name,
                    dto.championship_name,
                    exclude_id=team_assignment_id,
                ):
                    return ServiceResult.field_error(
                        "DuplicateAssignment", DUPLICATE_ASSIGNMENT_MESSAGE
                    )

            existing.apply_changes(
                team_name=dto.team_name,
                championship_name=dto.championship_name,
                joined_date=dto.joined_date,
                left_date=dto.left_date,
                actor_id=actor_id,
            )
            updated = await self.assignments.update(existing)
        except InvalidTransitionError as exc:
            logger.warning(
                f"Business rule violation updating team assignment {team_assignment_id}: {exc}"
            )
            return ServiceResult.fail(str(exc), kind=ErrorKind.CONFLICT)
        except RepositoryError as exc:
            return from_repository_error(exc, UPDATE_FAILED)
        except Exception:
            logger.exception(f"Error updating team assignment {team_assignment_id}")
            return ServiceResult.fail(UPDATE_FAILED)

        logger.info(f"Updated team assignment {team_assignment_id}")
        return ServiceResult.ok(TeamAssignmentRead.from_entity(updated))

    async def remove_player_from_team(
        self, team_assignment_id: int, left_date: date, actor_id: str
    ) -> ServiceResult[TeamAssignmentRead]:
        """Record left_date on an Active assignment, making it Inactive."""
        require_actor(actor_id)
        if left_date is None:
            raise ValueError("left_date cannot be None.")
        logger.info(f"Removing player from team assignment {team_assignment_id} by user {actor_id}")

        try:
            existing = await self.assignments.get_by_id(team_assignment_id)
            if existing is None:
                logger.warning(f"Team assignment {team_assignment_id} not found for removal")
                return ServiceResult.not_found(_not_found(team_assignment_id))

            validation = validate_left_date(left_date, existing.joined_date)
            if not validation.is_valid:
                logger.warning(f"Invalid left date for team assignment {team_assignment_id}")
                return ServiceResult.validation_failed(validation)

            existing.mark_as_left(left_date, actor_id)
            revalidated = validate_team_assignment(existing)
            if not revalidated.is_valid:
                return ServiceResult.validation_failed(revalidated)

            updated = await self.assignments.update(existing)
        except InvalidTransitionError as exc:
            logger.warning(
                f"Business rule violation removing player from team assignment "
                f"{team_assignment_id}: {exc}"
            )
            return ServiceResult.fail(str(exc), kind=ErrorKind.CONFLICT)
        except RepositoryError as exc:
            return from_repository_error(exc, UPDATE_FAILED)
        except Exception:
            logger.exception(f"Error removing player from team assignment {team_assignment_id}")
            return ServiceResult.fail(UPDATE_FAILED)

        logger.info(
            f"Removed player from team assignment {team_assignment_id}, "
            f"is_active={updated.is_active}"
        )
        return ServiceResult.ok(TeamAssignmentRead.from_entity(updated))

    async def delete_assignment(self, team_assignment_id: int) -> ServiceResult[bool]:
        """Hard delete an assignment and its statistics."""
        logger.info(f"Deleting team assignment {team_assignment_id}")
        try:
            if not await self.assignments.exists(team_assignment_id):
                logger.warning(f"Team assignment {team_assignment_id} not found for deletion")
                return ServiceResult.not_found(_not_found(team_assignment_id))
            deleted = await self.assignments.delete(team_assignment_id)
        except RepositoryError as exc:
            return from_repository_error(exc, DELETE_FAILED)
        except Exception:
            logger.exception(f"Error deleting team assignment {team_assignment_id}")
            return ServiceResult.fail(DELETE_FAILED)
        if not deleted:
            logger.warning(f"Team assignment {team_assignment_id} was not deleted")
            return delete_not_applied(DELETE_FAILED)
        return ServiceResult.ok(True)

    def validate_assignment(
        self, dto: TeamAssignmentCreate | TeamAssignmentUpdate
    ) -> ValidationResult:
        require_dto(dto, "dto")
        if isinstance(dto, TeamAssignmentUpdate):
            return validate_update_team_assignment(dto)
        return validate_create_team_assignment(dto)

