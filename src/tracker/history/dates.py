"""Calendar key derivation shared by every series lookup.

All keys are computed in UTC. Price maps, rate maps, and the primary
timeline must go through these helpers so a sample and its lookup always
land on the same calendar day.
"""

from datetime import date, datetime, timedelta, timezone


def to_utc(ts_seconds: int) -> datetime:
    """Convert a Unix timestamp in seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(ts_seconds, tz=timezone.utc)


def date_key(ts_seconds: int) -> str:
    """UTC calendar day of a timestamp as YYYY-MM-DD."""
    return to_utc(ts_seconds).date().isoformat()


def previous_day_key(ts_seconds: int) -> str:
    """Key of the UTC calendar day before the timestamp's day."""
    return (to_utc(ts_seconds).date() - timedelta(days=1)).isoformat()


def month_key(ts_seconds: int) -> str:
    """First-of-month key (YYYY-MM-01) for the timestamp's UTC month."""
    day = to_utc(ts_seconds).date()
    return f"{day.year:04d}-{day.month:02d}-01"


def is_weekday(ts_seconds: int) -> bool:
    """True for Monday through Friday (UTC)."""
    return to_utc(ts_seconds).weekday() < 5


def iso_instant(ts_seconds: int) -> str:
    """ISO-8601 instant with millisecond precision and a Z suffix."""
    return to_utc(ts_seconds).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_br_date(value: str) -> str:
    """Convert DD/MM/YYYY (optionally followed by a time) to YYYY-MM-DD.

    Raises ValueError on malformed input.
    """
    date_part = value.strip().split(" ")[0]
    return datetime.strptime(date_part, "%d/%m/%Y").date().isoformat()


def format_br_date(day: date) -> str:
    """Format a date as DD/MM/YYYY."""
    return day.strftime("%d/%m/%Y")


def key_to_timestamp(key: str) -> int:
    """Unix seconds at UTC midnight of a YYYY-MM-DD key."""
    day = date.fromisoformat(key)
    return int(datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp())
