from datetime import date, datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from roster.models.fields import MAX_NAME_LENGTH, MAX_PHOTO_URL_LENGTH
from roster.utils.dates import utc_now


class PlayerRecord(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "players"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(max_length=450, index=True)
    name: str = Field(max_length=MAX_NAME_LENGTH, index=True)
    date_of_birth: date
    gender: Optional[str] = Field(default=None, max_length=50)
    photo_url: Optional[str] = Field(default=None, max_length=MAX_PHOTO_URL_LENGTH)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime())
    created_by: str = Field(max_length=450)
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
    updated_by: Optional[str] = Field(default=None, max_length=450)
    row_version: int = Field(default=1)
