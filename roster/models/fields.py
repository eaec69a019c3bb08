"""
Shared limits and enumerations for roster records.
"""
from enum import Enum

MAX_NAME_LENGTH = 200
MAX_TEAM_NAME_LENGTH = 200
MAX_CHAMPIONSHIP_NAME_LENGTH = 200
MAX_PHOTO_URL_LENGTH = 500
MAX_AGE_IN_YEARS = 100

MAX_JOINED_DATE_FUTURE_YEARS = 1
MAX_JOINED_DATE_PAST_YEARS = 100

MIN_MINUTES_PLAYED = 0
MAX_MINUTES_PLAYED = 120
MIN_JERSEY_NUMBER = 1
MAX_JERSEY_NUMBER = 99


class Gender(str, Enum):
    male = "Male"
    female = "Female"
    non_binary = "Non-binary"
    prefer_not_to_say = "Prefer not to say"

    @classmethod
    def parse(cls, raw: str) -> "Gender | None":
        """Match a free-text value case-insensitively, or return None."""
        needle = raw.strip().casefold()
        for option in cls:
            if option.value.casefold() == needle:
                return option
        return None


VALID_GENDER_OPTIONS = tuple(g.value for g in Gender)
