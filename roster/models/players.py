from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from pydantic import computed_field
from sqlmodel import SQLModel

from roster.models.fields import Gender
from roster.utils.dates import utc_now, utc_today


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    """Whole years between date_of_birth and today (UTC)."""
    today = today or utc_today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def _clean_str(val: Optional[str]) -> Optional[str]:
    """Trim optional strings, returning None for blanks."""
    if val and val.strip():
        return val.strip()
    return None


def _normalize_gender(val: Optional[str]) -> Optional[str]:
    cleaned = _clean_str(val)
    if cleaned is None:
        return None
    option = Gender.parse(cleaned)
    return option.value if option else cleaned


@dataclass
class Player:
    """A tracked person. Owns its team assignments."""

    user_id: str
    name: str
    date_of_birth: date
    created_by: str
    gender: Optional[str] = None
    photo_url: Optional[str] = None
    id: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    row_version: int = 1

    @property
    def age(self) -> int:
        return calculate_age(self.date_of_birth)

    def touch(self, actor_id: str) -> None:
        """Stamp the audit fields for a modification by actor_id."""
        if not actor_id or not actor_id.strip():
            raise ValueError("Actor ID cannot be empty.")
        self.updated_at = utc_now()
        self.updated_by = actor_id


class PlayerCreate(SQLModel):
    user_id: Optional[str] = None
    name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    photo_url: Optional[str] = None

    def to_entity(self, actor_id: str) -> Player:
        """Build a new Player from validated input."""
        assert self.user_id is not None and self.name is not None
        assert self.date_of_birth is not None
        return Player(
            user_id=self.user_id.strip(),
            name=self.name.strip(),
            date_of_birth=self.date_of_birth,
            gender=_normalize_gender(self.gender),
            photo_url=_clean_str(self.photo_url),
            created_by=actor_id,
        )


class PlayerUpdate(SQLModel):
    id: int
    name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    photo_url: Optional[str] = None

    def apply_to(self, player: Player, actor_id: str) -> Player:
        """Copy validated mutable fields onto an existing Player."""
        assert self.name is not None and self.date_of_birth is not None
        player.name = self.name.strip()
        player.date_of_birth = self.date_of_birth
        player.gender = _normalize_gender(self.gender)
        player.photo_url = _clean_str(self.photo_url)
        player.touch(actor_id)
        return player


class PlayerRead(SQLModel):
    id: int
    user_id: str
    name: str
    date_of_birth: date
    gender: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: datetime
    created_by: str
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    @computed_field  # type: ignore[misc]
    @property
    def age(self) -> int:
        return calculate_age(self.date_of_birth)

    @classmethod
    def from_entity(cls, player: Player) -> "PlayerRead":
        assert player.id is not None
        return cls(
            id=player.id,
            user_id=player.user_id,
            name=player.name.strip(),
            date_of_birth=player.date_of_birth,
            gender=player.gender,
            photo_url=player.photo_url,
            created_at=player.created_at,
            created_by=player.created_by,
            updated_at=player.updated_at,
            updated_by=player.updated_by,
        )
