"""UTC clock helpers shared by validators, models and services."""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Return the current UTC time as a naive datetime (DB convention)."""
    return datetime.now(UTC).replace(tzinfo=None)


def utc_today() -> date:
    """Return today's date in UTC."""
    return datetime.now(UTC).date()


def add_years(value: date, years: int) -> date:
    """Shift a date by whole calendar years.

    Feb 29 falls back to Feb 28 when the target year is not a leap year.
    """
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)
