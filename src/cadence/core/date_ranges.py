"""Inclusive calendar date-range algebra.

Used for calendar selections: ranges are whole days, both ends inclusive,
and ranges that touch on consecutive days are treated as one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

__all__ = [
    "DateRange",
    "add_range",
    "is_date_in_ranges",
    "merge_ranges",
    "min_max_from_ranges",
    "normalize_range",
    "subtract_range",
]

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def normalize_range(a: date, b: date) -> DateRange:
    """Build a range with endpoints in ascending order."""
    return DateRange(a, b) if a <= b else DateRange(b, a)


def merge_ranges(ranges: list[DateRange]) -> list[DateRange]:
    """Merge overlapping or adjacent ranges.

    Returns
    -------
    list[DateRange]
        Sorted, disjoint ranges with at least one free day between each
    """
    if not ranges:
        return []

    ordered = sorted(ranges, key=lambda r: (r.start, r.end))
    merged = [ordered[0]]
    for current in ordered[1:]:
        previous = merged[-1]
        if current.start <= previous.end + _ONE_DAY:
            if current.end > previous.end:
                merged[-1] = DateRange(previous.start, current.end)
        else:
            merged.append(current)
    return merged


def add_range(ranges: list[DateRange], new_range: DateRange) -> list[DateRange]:
    """Add a range and re-merge."""
    return merge_ranges([*ranges, normalize_range(new_range.start, new_range.end)])


def subtract_range(ranges: list[DateRange], cut: DateRange) -> list[DateRange]:
    """Remove the days in ``cut`` from every range.

    Ranges split by the cut keep their left and right remainders.
    """
    cut = normalize_range(cut.start, cut.end)
    result: list[DateRange] = []
    for r in ranges:
        if cut.end < r.start or cut.start > r.end:
            result.append(r)
            continue
        if cut.start > r.start:
            result.append(DateRange(r.start, cut.start - _ONE_DAY))
        if cut.end < r.end:
            result.append(DateRange(cut.end + _ONE_DAY, r.end))
    return result


def min_max_from_ranges(ranges: list[DateRange]) -> tuple[date | None, date | None]:
    """Earliest start and latest end across ``ranges``."""
    if not ranges:
        return None, None
    return min(r.start for r in ranges), max(r.end for r in ranges)


def is_date_in_ranges(day: date, ranges: list[DateRange]) -> bool:
    return any(r.contains(day) for r in ranges)
