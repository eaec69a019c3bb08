"""Errors raised by repository implementations.

Services translate these into `ServiceResult` failures; they never reach
callers of the service layer directly.
"""

from typing import Optional


class RepositoryError(Exception):
    """A storage operation failed for a specific entity."""

    def __init__(
        self,
        message: str,
        operation: str,
        entity_type: str,
        entity_id: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.entity_type = entity_type
        self.entity_id = entity_id

    def __str__(self) -> str:
        target = self.entity_type
        if self.entity_id is not None:
            target = f"{target} {self.entity_id}"
        return f"{self.message} ({self.operation} {target})"


class ConcurrencyConflictError(RepositoryError):
    """The stored row changed since it was loaded (row_version mismatch)."""


class DuplicateAssignmentError(RepositoryError):
    """An active assignment already exists for the player, team and championship."""
