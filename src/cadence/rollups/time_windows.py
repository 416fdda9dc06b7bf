"""Complete calendar-week slicing with DST awareness.

Compute Monday-to-Sunday windows, as epoch-millisecond bounds, for local
weeks in the reference timezone. Handle DST transitions by aligning to
local midnights.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

import pytz

from ..core.time import (
    TimeConfig,
    datetime_to_epoch_ms,
    epoch_ms_to_datetime,
    format_utc_iso8601,
    is_dst_transition_day,
    is_valid_epoch_ms,
)
from ..observability import get_logger

__all__ = [
    "WEEK_SPAN_MS",
    "WeekWindow",
    "count_complete_weeks",
    "get_first_complete_week",
    "get_last_complete_week",
    "get_week_start",
    "has_complete_weeks",
    "local_midnight_ms",
    "slice_complete_weeks",
    "slice_date_blocks",
]

# Monday 00:00:00.000 .. Sunday 23:59:59.999 in a week without DST changes
WEEK_SPAN_MS = 7 * 24 * 60 * 60 * 1000 - 1

_log = get_logger("rollups")


@dataclass(frozen=True)
class WeekWindow:
    """A complete local calendar week, Monday through Sunday.

    Both bounds are inclusive epoch milliseconds.

    Attributes
    ----------
    start_ms : int
        Monday 00:00:00.000 local time
    end_ms : int
        Sunday 23:59:59.999 local time
    week_start_date : date
        Local date of the Monday
    timezone_name : str
        IANA timezone name
    has_dst_transition : bool
        Whether any day of the week includes a DST transition
    """

    start_ms: int
    end_ms: int
    week_start_date: date
    timezone_name: str
    has_dst_transition: bool = False

    @property
    def week_end_date(self) -> date:
        return self.week_start_date + timedelta(days=6)

    @property
    def week_key(self) -> str:
        return f"{self.week_start_date.isoformat()}_to_{self.week_end_date.isoformat()}"

    @property
    def start_utc(self) -> datetime:
        return epoch_ms_to_datetime(self.start_ms, "UTC")

    @property
    def end_utc(self) -> datetime:
        return epoch_ms_to_datetime(self.end_ms, "UTC")

    def contains(self, timestamp_ms: int | float) -> bool:
        """Check if an instant falls inside the window (both ends inclusive)."""
        return self.start_ms <= timestamp_ms <= self.end_ms

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "week_key": self.week_key,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "start_utc": format_utc_iso8601(self.start_utc),
            "end_utc": format_utc_iso8601(self.end_utc),
            "week_start_date": self.week_start_date.isoformat(),
            "week_end_date": self.week_end_date.isoformat(),
            "timezone": self.timezone_name,
            "has_dst_transition": self.has_dst_transition,
        }


def _pytz_timezone(timezone_str: str | None) -> Any:
    name = timezone_str or TimeConfig.get_default_timezone_name()
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as exc:
        raise ValueError(f"Invalid timezone: {name}") from exc


def get_week_start(dt: datetime, start_on: int = 0) -> datetime:
    """Get start of week for a datetime.

    Parameters
    ----------
    dt
        Datetime to get week start for
    start_on
        Day of week to start on (0=Monday, 6=Sunday)

    Returns
    -------
    datetime
        Start of week (same time as input)
    """
    days_since_start = (dt.weekday() - start_on) % 7
    return dt - timedelta(days=days_since_start)


def local_midnight_ms(local_date: date, timezone_str: str | None = None) -> int:
    """Epoch milliseconds of local midnight starting ``local_date``.

    Example
    -------
    >>> local_midnight_ms(date(2025, 9, 8), "Asia/Seoul")
    1757257200000
    """
    tz = _pytz_timezone(timezone_str)
    local_start = tz.localize(datetime(local_date.year, local_date.month, local_date.day, 0, 0, 0))
    return datetime_to_epoch_ms(local_start.astimezone(pytz.UTC))


def _first_monday_on_or_after(range_start_ms: int | float, timezone_str: str) -> date:
    local_start = epoch_ms_to_datetime(range_start_ms, "UTC").astimezone(_pytz_timezone(timezone_str))
    anchor = local_start.date()

    if anchor.weekday() == 0 and local_midnight_ms(anchor, timezone_str) == range_start_ms:
        return anchor

    days_to_monday = (7 - anchor.weekday()) % 7 or 7
    return anchor + timedelta(days=days_to_monday)


def slice_complete_weeks(
    range_start_ms: int | float,
    range_end_ms: int | float,
    timezone_str: str | None = None,
) -> list[WeekWindow]:
    """Slice a range into complete Monday-to-Sunday local weeks.

    A week is emitted only if both its Monday 00:00:00.000 start and its
    Sunday 23:59:59.999 end lie inside ``[range_start_ms, range_end_ms]``,
    where the range end extends to the last millisecond of its second.
    Partial weeks at either boundary are never emitted.

    Parameters
    ----------
    range_start_ms
        Range start (epoch ms, inclusive)
    range_end_ms
        Range end (epoch ms, inclusive)
    timezone_str
        IANA timezone for week alignment (default: reference timezone)

    Returns
    -------
    list[WeekWindow]
        Chronological, non-overlapping complete weeks. Empty for an
        inverted range or malformed instants.

    Raises
    ------
    ValueError
        If the timezone name is unknown

    Examples
    --------
    >>> # Monday 2025-09-08 00:00 KST through Sunday 2025-09-21 23:59:59 KST
    >>> weeks = slice_complete_weeks(1757257200000, 1758466799000, "Asia/Seoul")
    >>> [w.week_key for w in weeks]
    ['2025-09-08_to_2025-09-14', '2025-09-15_to_2025-09-21']
    """
    tz_name = timezone_str or TimeConfig.get_default_timezone_name()
    _pytz_timezone(tz_name)

    if not (is_valid_epoch_ms(range_start_ms) and is_valid_epoch_ms(range_end_ms)):
        _log.debug("Ignoring malformed range", range_start=repr(range_start_ms), range_end=repr(range_end_ms))
        return []

    if range_end_ms < range_start_ms:
        _log.debug("Ignoring inverted range", range_start=range_start_ms, range_end=range_end_ms)
        return []

    # The range end covers its whole second, so an end of Sunday 23:59:59
    # still admits a window ending at 23:59:59.999.
    range_end_cover = int(range_end_ms) // 1000 * 1000 + 999

    windows: list[WeekWindow] = []
    week_start = _first_monday_on_or_after(range_start_ms, tz_name)

    while True:
        start_ms = local_midnight_ms(week_start, tz_name)
        if start_ms > range_end_ms:
            break

        next_week = week_start + timedelta(days=7)
        end_ms = local_midnight_ms(next_week, tz_name) - 1

        if start_ms >= range_start_ms and end_ms <= range_end_cover:
            windows.append(
                WeekWindow(
                    start_ms=start_ms,
                    end_ms=end_ms,
                    week_start_date=week_start,
                    timezone_name=tz_name,
                    has_dst_transition=any(
                        is_dst_transition_day(week_start + timedelta(days=offset), tz_name)
                        for offset in range(7)
                    ),
                )
            )

        week_start = next_week

    _log.debug("Sliced complete weeks", timezone=tz_name, weeks=len(windows))
    return windows


def _parse_block_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid date format: {value!r}. Use YYYY-MM-DD") from exc


def slice_date_blocks(start_date: date | str, end_date: date | str) -> list[tuple[date, date]]:
    """Slice an inclusive date range into complete 7-day blocks.

    Blocks are anchored on ``start_date`` itself (no Monday alignment); a
    trailing block that would run past ``end_date`` is dropped.

    Raises
    ------
    ValueError
        If a date is malformed or ``start_date`` is after ``end_date``

    Example
    -------
    >>> slice_date_blocks("2025-10-01", "2025-10-14")
    [(datetime.date(2025, 10, 1), datetime.date(2025, 10, 7)), (datetime.date(2025, 10, 8), datetime.date(2025, 10, 14))]
    """
    start = _parse_block_date(start_date)
    end = _parse_block_date(end_date)

    if start > end:
        raise ValueError("Start date must be before or equal to end date")

    blocks: list[tuple[date, date]] = []
    block_start = start
    while block_start + timedelta(days=6) <= end:
        blocks.append((block_start, block_start + timedelta(days=6)))
        block_start += timedelta(days=7)

    return blocks


def count_complete_weeks(start_date: date | str, end_date: date | str) -> int:
    return len(slice_date_blocks(start_date, end_date))


def has_complete_weeks(start_date: date | str, end_date: date | str) -> bool:
    return count_complete_weeks(start_date, end_date) > 0


def get_first_complete_week(start_date: date | str, end_date: date | str) -> tuple[date, date] | None:
    """First 7-day block in the range, or None."""
    blocks = slice_date_blocks(start_date, end_date)
    return blocks[0] if blocks else None


def get_last_complete_week(start_date: date | str, end_date: date | str) -> tuple[date, date] | None:
    """Last 7-day block in the range, or None."""
    blocks = slice_date_blocks(start_date, end_date)
    return blocks[-1] if blocks else None
