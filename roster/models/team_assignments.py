"""Team assignment records: one player's stint on one team in one championship.

An assignment is Active while `left_date` is unset. Setting `left_date` moves
it to Inactive, which is terminal; a re-join is a new assignment.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from pydantic import computed_field
from sqlmodel import SQLModel

from roster.utils.dates import utc_now, utc_today


class InvalidTransitionError(ValueError):
    """Raised when an assignment state change breaks the Active -> Inactive rule."""


@dataclass
class TeamAssignment:
    player_id: int
    team_name: str
    championship_name: str
    joined_date: date
    created_by: str
    left_date: Optional[date] = None
    id: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    row_version: int = 1

    @property
    def is_active(self) -> bool:
        return self.left_date is None

    def touch(self, actor_id: str) -> None:
        if not actor_id or not actor_id.strip():
            raise ValueError("Actor ID cannot be empty.")
        self.updated_at = utc_now()
        self.updated_by = actor_id

    def mark_as_left(self, left_date: date, actor_id: str) -> None:
        """Close an Active assignment on left_date."""
        if not self.is_active:
            raise InvalidTransitionError("Player has already left the team.")
        if left_date <= self.joined_date:
            raise InvalidTransitionError("Left date must be after the joined date.")
        if left_date > utc_today():
            raise InvalidTransitionError("Left date cannot be in the future.")
        self.touch(actor_id)
        self.left_date = left_date

    def apply_changes(
        self,
        *,
        team_name: str,
        championship_name: str,
        joined_date: date,
        left_date: Optional[date],
        actor_id: str,
    ) -> None:
        """Overwrite the mutable fields, honouring the one-way transition."""
        if not self.is_active and left_date is None:
            raise InvalidTransitionError(
                "An inactive team assignment cannot be reactivated. "
                "Add a new assignment instead."
            )
        if left_date is not None:
            if left_date <= joined_date:
                raise InvalidTransitionError("Left date must be after the joined date.")
            if left_date > utc_today():
                raise InvalidTransitionError("Left date cannot be in the future.")
        self.touch(actor_id)
        self.team_name = team_name.strip()
        self.championship_name = championship_name.strip()
        self.joined_date = joined_date
        # Inactive records may have their left date corrected, never cleared
        self.left_date = left_date


class TeamAssignmentCreate(SQLModel):
    player_id: Optional[int] = None
    team_name: Optional[str] = None
    championship_name: Optional[str] = None
    joined_date: Optional[date] = None

    def to_entity(self, actor_id: str) -> TeamAssignment:
        assert self.player_id is not None and self.joined_date is not None
        assert self.team_name is not None and self.championship_name is not None
        return TeamAssignment(
            player_id=self.player_id,
            team_name=self.team_name.strip(),
            championship_name=self.championship_name.strip(),
            joined_date=self.joined_date,
            created_by=actor_id,
        )


class TeamAssignmentUpdate(SQLModel):
    team_assignment_id: int
    team_name: Optional[str] = None
    championship_name: Optional[str] = None
    joined_date: Optional[date] = None
    left_date: Optional[date] = None


class TeamAssignmentRead(SQLModel):
    id: int
    player_id: int
    team_name: str
    championship_name: str
    joined_date: date
    left_date: Optional[date] = None
    created_at: datetime
    created_by: str
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    @computed_field  # type: ignore[misc]
    @property
    def is_active(self) -> bool:
        return self.left_date is None

    @computed_field  # type: ignore[misc]
    @property
    def duration_days(self) -> int:
        """Days on the team, up to the left date or today."""
        end = self.left_date or utc_today()
        return (end - self.joined_date).days

    @classmethod
    def from_entity(cls, assignment: TeamAssignment) -> "TeamAssignmentRead":
        assert assignment.id is not None
        return cls(
            id=assignment.id,
            player_id=assignment.player_id,
            team_name=assignment.team_name.strip(),
            championship_name=assignment.championship_name.strip(),
            joined_date=assignment.joined_date,
            left_date=assignment.left_date,
            created_at=assignment.created_at,
            created_by=assignment.created_by,
            updated_at=assignment.updated_at,
            updated_by=assignment.updated_by,
        )


class TeamAssignmentLeave(SQLModel):
    left_date: date
