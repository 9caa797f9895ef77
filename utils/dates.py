"""Clock helpers and calendar date keys.

The daily game is keyed by the UTC calendar day, formatted as YYYY-MM-DD.
"""

from collections.abc import Callable
from datetime import datetime, timezone

DATE_KEY_FORMAT = "%Y-%m-%d"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current instant in UTC."""
    return datetime.now(timezone.utc)


def to_date_key(moment: datetime) -> str:
    """Format an instant as its UTC calendar day.

    Naive datetimes are taken to already be in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(DATE_KEY_FORMAT)


def today_date_key(clock: Clock = utc_now) -> str:
    """Date key for the current UTC day according to the given clock."""
    return to_date_key(clock())


def parse_date_key(date_key: str) -> datetime:
    """Parse a date key back to midnight UTC of that day.

    Raises ValueError for anything that is not a YYYY-MM-DD date.
    """
    return datetime.strptime(date_key, DATE_KEY_FORMAT).replace(tzinfo=timezone.utc)
