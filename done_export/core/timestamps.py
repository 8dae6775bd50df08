"""
UTC timestamp helpers.

All timestamps written by the exporter use one canonical form:
YYYY-MM-DDTHH:MM:SS.mmmZ (millisecond precision, UTC designator).
"""

import re
from datetime import datetime, timedelta, timezone

# ISO-8601 UTC timestamps as SharePoint returns them ("Z" designator, optional seconds and fraction)
ISO_UTC_PATTERN = re.compile(
    r"(?P<minutes>[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2})"
    r"(?::(?P<second>[0-9]{2})(?:\.(?P<fraction>[0-9]+))?)?Z"
)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso_utc(value: datetime) -> str:
    """
    Format a datetime as a canonical ISO-8601 UTC string.

    Naive datetimes are taken to be UTC.

    Examples:
        >>> to_iso_utc(datetime(2023, 1, 1, tzinfo=timezone.utc))
        '2023-01-01T00:00:00.000Z'
    """
    return _as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_utc(text: str) -> datetime | None:
    """
    Parse an ISO-8601 UTC timestamp ending in "Z".

    Returns None when the text does not match the pattern or names an
    impossible date (e.g. month 13). Fractions beyond microseconds are
    truncated.
    """
    match = ISO_UTC_PATTERN.fullmatch(text)
    if not match:
        return None

    # fromisoformat on Python 3.10 only takes 3 or 6 fraction digits and no "Z"
    fraction = (match.group("fraction") or "0")[:6].ljust(6, "0")
    second = match.group("second") or "00"
    try:
        return datetime.fromisoformat(f"{match.group('minutes')}:{second}.{fraction}+00:00")
    except ValueError:
        return None


def threshold_date(older_than_days: int, now: datetime | None = None) -> datetime:
    """
    Cut-off instant for an export: now minus the given number of days.

    Raises:
        ValueError: If older_than_days is negative
    """
    if older_than_days < 0:
        raise ValueError(f"older_than_days must be non-negative, got {older_than_days}")
    return _as_utc(now or utcnow()) - timedelta(days=older_than_days)


def file_date(now: datetime | None = None) -> str:
    """UTC calendar day used in export file names (YYYY-MM-DD)."""
    return _as_utc(now or utcnow()).date().isoformat()
