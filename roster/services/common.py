"""Argument guards and repository-fault translation shared by the services."""

import logging
from typing import Any

from roster.models.results import ErrorKind, ServiceResult
from roster.repositories.errors import (
    ConcurrencyConflictError,
    DuplicateAssignmentError,
    RepositoryError,
)

logger = logging.getLogger(__name__)

DUPLICATE_ASSIGNMENT_MESSAGE = (
    "Player already has an active assignment to this team and championship."
)


def require_actor(actor_id: str) -> None:
    """Blank actor ids are a caller bug and raise immediately."""
    if actor_id is None or not str(actor_id).strip():
        raise ValueError("Current user ID cannot be null or whitespace.")


def require_dto(dto: Any, name: str) -> None:
    if dto is None:
        raise ValueError(f"{name} cannot be None.")


def from_repository_error(exc: RepositoryError, fallback: str) -> ServiceResult[Any]:
    """Map a repository fault onto the matching failure channel."""
    if isinstance(exc, ConcurrencyConflictError):
        logger.warning(f"Concurrency conflict: {exc}")
        return ServiceResult.fail(exc.message, kind=ErrorKind.CONFLICT)
    if isinstance(exc, DuplicateAssignmentError):
        logger.warning(f"Duplicate active assignment: {exc}")
        return ServiceResult.field_error("DuplicateAssignment", DUPLICATE_ASSIGNMENT_MESSAGE)
    logger.error(f"Repository error: {exc}", exc_info=exc)
    return ServiceResult.fail(fallback)


def delete_not_applied(message: str) -> ServiceResult[bool]:
    """The row existed but the delete affected nothing (lost a race)."""
    return ServiceResult(
        success=False, data=False, error_messages=[message], error_kind=ErrorKind.NOT_APPLIED
    )
