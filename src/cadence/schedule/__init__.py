"""Schedule expansion: weekly rules plus calendar overrides into occurrences."""

from .compute import (
    GoalSchedule,
    Occurrence,
    OccurrencePreview,
    ScheduleError,
    ScheduleOverride,
    ScheduleRule,
    build_occurrences,
    parse_schedule,
    preview_occurrences,
    validate_occurrences,
)

__all__ = [
    "GoalSchedule",
    "Occurrence",
    "OccurrencePreview",
    "ScheduleError",
    "ScheduleOverride",
    "ScheduleRule",
    "build_occurrences",
    "parse_schedule",
    "preview_occurrences",
    "validate_occurrences",
]
