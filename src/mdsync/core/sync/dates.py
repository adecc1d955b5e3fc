"""
Date parsing for ``Date`` and ``Updated`` fields.

Front matter dates are local times unless they say otherwise. A value is
interpreted in the configured zone (or the system zone), and both forms
are kept: the local string as written to the record, and its UTC twin.
"""

from datetime import date, datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mdsync.core.errors import ConfigurationError, InvalidDocument

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Suffixes that mark a string as already being UTC
UTC_SUFFIXES = (" UTC", " GMT", "Z")


def get_timezone(name: str | None) -> tzinfo | None:
    """
    Return the zone called ``name``, or None for the system zone.

    Raises:
        ConfigurationError: If the zone name is unknown
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown timezone '{name}'") from e


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip()
    for suffix in UTC_SUFFIXES:
        if len(text) > len(suffix) and text.upper().endswith(suffix):
            text = text[: -len(suffix)].rstrip() + "+00:00"
            break
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise InvalidDocument(f"invalid date {value!r}") from e


def parse_date(value: Any, zone: tzinfo | None = None) -> tuple[str, str]:
    """
    Normalize a front matter date.

    Args:
        value: String, date or datetime from the front matter
        zone: Zone for values without an offset (None: system zone)

    Returns:
        ``(local, utc)`` strings formatted as ``YYYY-MM-DD HH:MM:SS``

    Raises:
        InvalidDocument: If ``value`` is not a recognizable date

    Example:
        >>> parse_date("2024-03-01 09:30", ZoneInfo("Europe/Paris"))
        ('2024-03-01 09:30:00', '2024-03-01 08:30:00')
    """
    dt = _to_datetime(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=zone) if zone is not None else dt.astimezone()
    local = dt.astimezone(zone) if zone is not None else dt.astimezone()
    return local.strftime(DATE_FORMAT), dt.astimezone(timezone.utc).strftime(DATE_FORMAT)
