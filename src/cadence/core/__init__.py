"""Core value types and time utilities."""

from .date_ranges import (
    DateRange,
    add_range,
    is_date_in_ranges,
    merge_ranges,
    min_max_from_ranges,
    normalize_range,
    subtract_range,
)
from .models import VerificationKind, VerificationMethod, VerificationRecord
from .time import (
    DEFAULT_REFERENCE_TIMEZONE,
    TimeConfig,
    epoch_ms_to_local_date,
    get_default_timezone,
    parse_instant_ms,
    set_default_timezone,
)

__all__ = [
    "DEFAULT_REFERENCE_TIMEZONE",
    "DateRange",
    "TimeConfig",
    "VerificationKind",
    "VerificationMethod",
    "VerificationRecord",
    "add_range",
    "epoch_ms_to_local_date",
    "get_default_timezone",
    "is_date_in_ranges",
    "merge_ranges",
    "min_max_from_ranges",
    "normalize_range",
    "parse_instant_ms",
    "set_default_timezone",
    "subtract_range",
]
