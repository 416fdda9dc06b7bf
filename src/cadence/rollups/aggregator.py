"""Weekly frequency aggregation.

Count distinct verified days per complete calendar week and decide
pass/fail per week and across the whole range.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from ..core.time import TimeConfig, epoch_ms_to_local_date, format_utc_iso8601, is_valid_epoch_ms
from ..observability import get_logger
from .time_windows import WeekWindow, slice_complete_weeks

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..core.models import VerificationRecord

__all__ = [
    "NO_COMPLETE_WEEKS_REASON",
    "AggregationReport",
    "InvalidArgumentError",
    "WeekResult",
    "aggregate_frequency",
    "summarize_week",
]

NO_COMPLETE_WEEKS_REASON = "No complete 7-day blocks in range"
ALL_WEEKS_PASSED_REASON = "All complete weeks achieved target"


class InvalidArgumentError(ValueError):
    """Raised when an aggregation argument is out of its allowed domain."""


@dataclass(frozen=True)
class WeekResult:
    """Verdict for one complete week.

    Attributes
    ----------
    window : WeekWindow
        Week bounds
    verification_days : tuple[date, ...]
        Distinct local days with at least one passing record, ascending
    target : int
        Required distinct days
    """

    window: WeekWindow
    verification_days: tuple[date, ...]
    target: int

    @property
    def count(self) -> int:
        return len(self.verification_days)

    @property
    def passed(self) -> bool:
        return self.count >= self.target

    @property
    def week_key(self) -> str:
        return self.window.week_key

    @property
    def start_ms(self) -> int:
        return self.window.start_ms

    @property
    def end_ms(self) -> int:
        return self.window.end_ms

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "week_key": self.week_key,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "start_utc": format_utc_iso8601(self.window.start_utc),
            "end_utc": format_utc_iso8601(self.window.end_utc),
            "count": self.count,
            "target": self.target,
            "passed": self.passed,
            "verification_days": [day.isoformat() for day in self.verification_days],
        }


@dataclass(frozen=True)
class AggregationReport:
    """Per-week results and the overall verdict for a range.

    Attributes
    ----------
    week_results : tuple[WeekResult, ...]
        One result per complete week, chronological
    overall_pass : bool
        True only if there is at least one week and every week passed
    reason : str
        Human-readable summary of the verdict
    """

    week_results: tuple[WeekResult, ...]
    overall_pass: bool
    reason: str

    @property
    def total_weeks(self) -> int:
        return len(self.week_results)

    @property
    def passed_weeks(self) -> int:
        return sum(1 for result in self.week_results if result.passed)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_weeks": self.total_weeks,
            "passed_weeks": self.passed_weeks,
            "overall_pass": self.overall_pass,
            "reason": self.reason,
            "week_results": [result.to_dict() for result in self.week_results],
        }


def _validate_target(target_per_week: Any) -> int:
    if isinstance(target_per_week, bool) or not isinstance(target_per_week, int):
        raise InvalidArgumentError(f"target_per_week must be an integer, got {target_per_week!r}")
    if target_per_week < 1:
        raise InvalidArgumentError(f"target_per_week must be at least 1, got {target_per_week}")
    return target_per_week


def summarize_week(
    window: WeekWindow,
    passing_timestamps: list[int],
    target: int,
    timezone_str: str | None = None,
) -> WeekResult:
    """Build the result for one week from ascending passing timestamps.

    Only timestamps inside the window (both ends inclusive) are counted, and
    each local calendar day counts once.
    """
    lo = bisect_left(passing_timestamps, window.start_ms)
    hi = bisect_right(passing_timestamps, window.end_ms)
    days = {epoch_ms_to_local_date(ts, timezone_str) for ts in passing_timestamps[lo:hi]}
    return WeekResult(window=window, verification_days=tuple(sorted(days)), target=target)


def aggregate_frequency(
    records: Iterable[VerificationRecord],
    target_per_week: int,
    range_start_ms: int | float,
    range_end_ms: int | float,
    *,
    timezone_str: str | None = None,
    logger: Any = None,
) -> AggregationReport:
    """Aggregate verification records into weekly frequency verdicts.

    Parameters
    ----------
    records
        Verification records; records outside the range simply match no week
    target_per_week
        Minimum distinct passing days per week (integer >= 1)
    range_start_ms
        Analysis range start (epoch ms, inclusive)
    range_end_ms
        Analysis range end (epoch ms, inclusive)
    timezone_str
        IANA timezone for week alignment and day keys (default: reference timezone)
    logger
        Loguru-style logger for diagnostics (default: aggregation component logger)

    Returns
    -------
    AggregationReport
        Report with one result per complete week

    Raises
    ------
    InvalidArgumentError
        If ``target_per_week`` is not an integer >= 1

    Example
    -------
    >>> report = aggregate_frequency([], 3, 1757257200000, 1758466799000)
    >>> (report.total_weeks, report.overall_pass, report.reason)
    (2, False, '0/2 weeks passed')
    """
    target = _validate_target(target_per_week)
    log = logger if logger is not None else get_logger("aggregation")
    tz_name = timezone_str or TimeConfig.get_default_timezone_name()

    weeks = slice_complete_weeks(range_start_ms, range_end_ms, tz_name)
    if not weeks:
        log.debug(
            "No complete weeks to aggregate",
            range_start=repr(range_start_ms),
            range_end=repr(range_end_ms),
            timezone=tz_name,
        )
        return AggregationReport(week_results=(), overall_pass=False, reason=NO_COMPLETE_WEEKS_REASON)

    passing = sorted(
        record.timestamp_ms for record in records if record.passed and is_valid_epoch_ms(record.timestamp_ms)
    )

    results = tuple(summarize_week(week, passing, target, tz_name) for week in weeks)
    for result in results:
        log.debug(
            "Week aggregated",
            week_key=result.week_key,
            count=result.count,
            target=target,
            passed=result.passed,
        )

    passed_weeks = sum(1 for result in results if result.passed)
    overall_pass = passed_weeks == len(results)
    reason = ALL_WEEKS_PASSED_REASON if overall_pass else f"{passed_weeks}/{len(results)} weeks passed"

    log.debug("Frequency aggregated", total_weeks=len(results), passed_weeks=passed_weeks, overall_pass=overall_pass)
    return AggregationReport(week_results=results, overall_pass=overall_pass, reason=reason)
