"""Time and timezone utilities for Cadence.

Provides consistent timezone handling across the system with:
- A single reference timezone for week alignment and day keys
- Epoch-millisecond <-> civil date/time conversion
- ISO-8601 parsing and formatting in UTC
- DST awareness for calendar days
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = [
    "DEFAULT_REFERENCE_TIMEZONE",
    "TimeConfig",
    "datetime_to_epoch_ms",
    "epoch_ms_to_datetime",
    "epoch_ms_to_local_date",
    "format_utc_iso8601",
    "get_default_timezone",
    "is_dst_transition_day",
    "is_valid_epoch_ms",
    "load_timezone_from_config",
    "parse_utc_iso8601",
    "parse_instant_ms",
    "resolve_timezone",
    "set_default_timezone",
]

DEFAULT_REFERENCE_TIMEZONE = "Asia/Seoul"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Slack on both ends keeps local conversion and Monday anchoring inside datetime's range.
MIN_EPOCH_MS = int((datetime(1, 1, 2, tzinfo=timezone.utc) - _EPOCH).total_seconds()) * 1000
MAX_EPOCH_MS = int((datetime(9999, 12, 1, tzinfo=timezone.utc) - _EPOCH).total_seconds()) * 1000


class TimeConfig:
    """Global time configuration."""

    _default_timezone = DEFAULT_REFERENCE_TIMEZONE

    @classmethod
    def get_default_timezone_name(cls) -> str:
        """Get the reference timezone name.

        Returns
        -------
        str
            Timezone name (e.g., "Asia/Seoul")
        """
        return cls._default_timezone

    @classmethod
    def set_default_timezone_name(cls, timezone_name: str) -> None:
        """Set the reference timezone.

        Parameters
        ----------
        timezone_name
            IANA timezone name (e.g., "Asia/Seoul", "America/New_York")

        Raises
        ------
        ValueError
            If timezone is invalid
        """
        resolve_timezone(timezone_name)
        cls._default_timezone = timezone_name

    @classmethod
    def reset(cls) -> None:
        """Restore the built-in reference timezone."""
        cls._default_timezone = DEFAULT_REFERENCE_TIMEZONE


def resolve_timezone(tz: ZoneInfo | str | None = None) -> ZoneInfo:
    """Resolve a timezone argument to a ZoneInfo.

    ``None`` means the configured reference timezone, never the machine's
    local zone.

    Raises
    ------
    ValueError
        If the name is not a known IANA timezone
    """
    if isinstance(tz, ZoneInfo):
        return tz
    if tz is None:
        tz = TimeConfig.get_default_timezone_name()
    if not isinstance(tz, str) or not tz:
        raise ValueError(f"Invalid timezone: {tz!r}")
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone: {tz}") from exc


def get_default_timezone() -> ZoneInfo:
    """Get the reference timezone object."""
    return resolve_timezone(None)


def set_default_timezone(timezone_name: str) -> None:
    """Set the reference timezone for the process.

    Raises
    ------
    ValueError
        If timezone is invalid
    """
    TimeConfig.set_default_timezone_name(timezone_name)


def load_timezone_from_config(config: dict[str, Any]) -> None:
    """Apply ``reference_timezone`` from a configuration mapping.

    Raises
    ------
    ValueError
        If the configured timezone is invalid
    """
    tz_name = config.get("reference_timezone")
    if tz_name:
        set_default_timezone(tz_name)


def is_valid_epoch_ms(value: Any) -> bool:
    """Check that ``value`` is a finite epoch-millisecond instant in calendar range."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return MIN_EPOCH_MS <= value <= MAX_EPOCH_MS


def epoch_ms_to_datetime(ms: int | float, tz: ZoneInfo | str | None = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime in ``tz``.

    Uses exact timedelta arithmetic, so millisecond precision is kept.

    Example
    -------
    >>> epoch_ms_to_datetime(0, "UTC").isoformat()
    '1970-01-01T00:00:00+00:00'
    """
    utc_dt = _EPOCH + timedelta(milliseconds=ms)
    return utc_dt.astimezone(resolve_timezone(tz))


def datetime_to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds.

    Naive datetimes are treated as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def epoch_ms_to_local_date(ms: int | float, tz: ZoneInfo | str | None = None) -> date:
    """Calendar day (in ``tz``) containing the instant ``ms``.

    Example
    -------
    >>> # 2025-09-07T23:30:00+00:00 is already Monday in Seoul
    >>> epoch_ms_to_local_date(1757287800000, "Asia/Seoul")
    datetime.date(2025, 9, 8)
    """
    return epoch_ms_to_datetime(ms, tz).date()


def format_utc_iso8601(dt: datetime) -> str:
    """Format datetime as ISO-8601 UTC string.

    Naive datetimes are assumed to be UTC.

    Example
    -------
    >>> dt = datetime(2025, 10, 8, 12, 30, 0, tzinfo=timezone.utc)
    >>> format_utc_iso8601(dt)
    '2025-10-08T12:30:00+00:00'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.isoformat()


def parse_utc_iso8601(iso_string: str, tz: tzinfo | None = None) -> datetime:
    """Parse ISO-8601 string to UTC datetime.

    Parameters
    ----------
    iso_string
        ISO-8601 formatted string; a trailing ``Z`` means UTC
    tz
        Zone assumed for strings without an offset (default: UTC)

    Raises
    ------
    ValueError
        If string is not valid ISO-8601 or lies outside the datetime range

    Example
    -------
    >>> parse_utc_iso8601("2025-09-08T00:00:00+09:00").isoformat()
    '2025-09-07T15:00:00+00:00'
    """
    if iso_string.endswith("Z"):
        iso_string = iso_string[:-1] + "+00:00"

    dt = datetime.fromisoformat(iso_string)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz or timezone.utc)

    try:
        return dt.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValueError(f"Instant out of range: {iso_string}") from exc


def parse_instant_ms(value: str, tz: ZoneInfo | str | None = None) -> int:
    """Parse an ISO-8601 string to epoch milliseconds.

    Strings without an offset are read as wall time in ``tz`` (default:
    reference timezone).

    Raises
    ------
    ValueError
        If the string cannot be parsed or the instant is outside the
        supported calendar range
    """
    ms = datetime_to_epoch_ms(parse_utc_iso8601(value, resolve_timezone(tz)))
    if not is_valid_epoch_ms(ms):
        raise ValueError(f"Instant out of range: {value}")
    return ms


def is_dst_transition_day(date_obj: Any, tz: ZoneInfo | str | None = None) -> bool:
    """Check if a local calendar day includes a DST transition.

    Example
    -------
    >>> is_dst_transition_day(date(2025, 3, 30), "Europe/Brussels")
    True
    >>> is_dst_transition_day(date(2025, 10, 8), "Europe/Brussels")
    False
    """
    if isinstance(date_obj, datetime):
        date_obj = date_obj.date()
    elif not isinstance(date_obj, date):
        raise TypeError(f"Expected date or datetime, got {type(date_obj)}")

    zone = resolve_timezone(tz)
    start_of_day = datetime.combine(date_obj, datetime.min.time(), tzinfo=zone)
    next_day = datetime.combine(date_obj + timedelta(days=1), datetime.min.time(), tzinfo=zone)

    return start_of_day.utcoffset() != next_day.utcoffset()
