"""Weekly rollups: complete-week slicing and frequency aggregation."""

from .aggregator import AggregationReport, InvalidArgumentError, WeekResult, aggregate_frequency
from .time_windows import (
    WeekWindow,
    count_complete_weeks,
    get_first_complete_week,
    get_last_complete_week,
    get_week_start,
    has_complete_weeks,
    slice_complete_weeks,
    slice_date_blocks,
)

__all__ = [
    # Time windows
    "WeekWindow",
    "slice_complete_weeks",
    "slice_date_blocks",
    "count_complete_weeks",
    "has_complete_weeks",
    "get_first_complete_week",
    "get_last_complete_week",
    "get_week_start",
    # Aggregation
    "AggregationReport",
    "InvalidArgumentError",
    "WeekResult",
    "aggregate_frequency",
]
