"""Schedule computation engine.

Converts weekly schedule rules into concrete occurrences with timezone
support, applying calendar overrides (cancel/retime/add/move).

Core flow:
1. Expand rules (weekdays + time) across the period -> local occurrences
2. Apply overrides in order
3. Sort and convert to UTC
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Literal

import pytz

from ..core.time import TimeConfig, format_utc_iso8601
from ..observability import get_logger

__all__ = [
    "MAX_OCCURRENCES",
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

MAX_OCCURRENCES = 100
DEFAULT_RULE_TIME = "09:00"
DEFAULT_DURATION_MIN = 60

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_WEEKDAY_ALIASES = {name[:3].lower(): index for index, name in enumerate(WEEKDAY_NAMES)}

OverrideKind = Literal["cancel", "retime", "add", "move"]

_log = get_logger("schedule")


class ScheduleError(ValueError):
    """Raised when a schedule document is malformed."""


def _parse_time(value: str | time) -> time:
    if isinstance(value, time):
        return value
    try:
        hours, minutes = str(value).split(":")
        return time(int(hours), int(minutes))
    except ValueError as exc:
        raise ScheduleError(f"Invalid time {value!r}. Use HH:MM") from exc


def _parse_date(value: str | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ScheduleError(f"Invalid date {value!r}. Use YYYY-MM-DD") from exc


def _parse_weekday(value: int | str) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6:
        return value
    if isinstance(value, str) and value[:3].lower() in _WEEKDAY_ALIASES:
        return _WEEKDAY_ALIASES[value[:3].lower()]
    raise ScheduleError(f"Invalid weekday {value!r}. Use 0-6 (Monday=0) or a day name")


@dataclass(frozen=True)
class ScheduleRule:
    """Recurring slot: the same local time on a set of weekdays.

    Weekdays follow ``date.weekday()``: 0=Monday .. 6=Sunday.
    """

    weekdays: frozenset[int]
    time: time = field(default_factory=lambda: _parse_time(DEFAULT_RULE_TIME))

    def applies_to(self, day: date) -> bool:
        return day.weekday() in self.weekdays


@dataclass(frozen=True)
class ScheduleOverride:
    """One calendar override.

    ``cancel`` uses ``date``; ``retime`` and ``add`` use ``date`` and
    ``time``; ``move`` uses ``date`` (the original day), ``to_date`` and
    ``time`` (the new slot).
    """

    kind: OverrideKind
    date: date
    time: time | None = None
    to_date: date | None = None

    def __post_init__(self) -> None:
        if self.kind not in ("cancel", "retime", "add", "move"):
            raise ScheduleError(f"Unknown override kind: {self.kind!r}")
        if self.kind in ("retime", "add", "move") and self.time is None:
            raise ScheduleError(f"Override '{self.kind}' on {self.date} needs a time")
        if self.kind == "move" and self.to_date is None:
            raise ScheduleError(f"Override 'move' from {self.date} needs a to_date")


@dataclass(frozen=True)
class GoalSchedule:
    """Schedule of a goal over an inclusive period of local days."""

    period_start: date
    period_end: date
    rules: tuple[ScheduleRule, ...] = ()
    overrides: tuple[ScheduleOverride, ...] = ()
    timezone: str = field(default_factory=TimeConfig.get_default_timezone_name)
    default_duration_min: int = DEFAULT_DURATION_MIN


@dataclass(frozen=True)
class Occurrence:
    """A concrete scheduled slot in UTC."""

    start_utc: datetime
    end_utc: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "start": format_utc_iso8601(self.start_utc),
            "end": format_utc_iso8601(self.end_utc) if self.end_utc else None,
        }


@dataclass(frozen=True)
class OccurrencePreview:
    """Human-readable occurrence for display before confirmation."""

    date: date
    time: str
    day_name: str
    week_number: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "date": self.date.isoformat(),
            "time": self.time,
            "day_name": self.day_name,
            "week_number": self.week_number,
        }


def _expand_rules(schedule: GoalSchedule) -> list[datetime]:
    occurrences: list[datetime] = []
    day = schedule.period_start
    while day <= schedule.period_end:
        for rule in schedule.rules:
            if rule.applies_to(day):
                occurrences.append(datetime.combine(day, rule.time))
        day += timedelta(days=1)
    return occurrences


def _apply_overrides(occurrences: list[datetime], overrides: tuple[ScheduleOverride, ...]) -> list[datetime]:
    result = list(occurrences)

    for override in overrides:
        if override.kind == "cancel":
            result = [dt for dt in result if dt.date() != override.date]
        elif override.kind == "retime":
            result = [
                datetime.combine(dt.date(), override.time) if dt.date() == override.date else dt
                for dt in result
            ]
        elif override.kind == "add":
            result.append(datetime.combine(override.date, override.time))
        elif override.kind == "move":
            result = [dt for dt in result if dt.date() != override.date]
            result.append(datetime.combine(override.to_date, override.time))

        _log.debug("Override applied", kind=override.kind, date=override.date.isoformat(), remaining=len(result))

    return result


def _schedule_timezone(timezone_name: Any) -> Any:
    if not isinstance(timezone_name, str):
        raise ValueError(f"Invalid timezone: {timezone_name!r}")
    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError as exc:
        raise ValueError(f"Invalid timezone: {timezone_name}") from exc


def _local_occurrences(schedule: GoalSchedule) -> list[datetime]:
    return sorted(_apply_overrides(_expand_rules(schedule), schedule.overrides))


def build_occurrences(schedule: GoalSchedule) -> list[Occurrence]:
    """Build final UTC occurrences from a schedule.

    Parameters
    ----------
    schedule
        Schedule with rules, overrides and period

    Returns
    -------
    list[Occurrence]
        Occurrences sorted by start, each lasting ``default_duration_min``

    Raises
    ------
    ValueError
        If the schedule timezone is unknown
    """
    if not schedule.rules:
        _log.warning("No schedule rules defined", period_start=schedule.period_start.isoformat())
        return []

    tz = _schedule_timezone(schedule.timezone)
    duration = timedelta(minutes=schedule.default_duration_min or DEFAULT_DURATION_MIN)
    occurrences = []
    for local_dt in _local_occurrences(schedule):
        start_utc = tz.normalize(tz.localize(local_dt)).astimezone(pytz.UTC)
        occurrences.append(Occurrence(start_utc=start_utc, end_utc=start_utc + duration))

    _log.debug(
        "Occurrences built",
        timezone=schedule.timezone,
        rules=len(schedule.rules),
        overrides=len(schedule.overrides),
        occurrences=len(occurrences),
    )
    return occurrences


def preview_occurrences(schedule: GoalSchedule) -> list[OccurrencePreview]:
    """Local-time preview of a schedule, numbered by week from the period start.

    Raises
    ------
    ValueError
        If the schedule timezone is unknown
    """
    _schedule_timezone(schedule.timezone)
    if not schedule.rules:
        return []

    return [
        OccurrencePreview(
            date=local_dt.date(),
            time=local_dt.strftime("%H:%M"),
            day_name=WEEKDAY_NAMES[local_dt.weekday()],
            week_number=(local_dt.date() - schedule.period_start).days // 7 + 1,
        )
        for local_dt in _local_occurrences(schedule)
    ]


def validate_occurrences(occurrences: list[Occurrence]) -> tuple[bool, list[str]]:
    """Check that a schedule produced a usable number of well-formed slots.

    Returns
    -------
    tuple[bool, list[str]]
        (valid, errors)
    """
    errors: list[str] = []

    if not occurrences:
        errors.append("At least one occurrence is required")

    if len(occurrences) > MAX_OCCURRENCES:
        errors.append(f"At most {MAX_OCCURRENCES} occurrences are allowed")

    for occurrence in occurrences:
        if occurrence.end_utc is not None and occurrence.end_utc < occurrence.start_utc:
            errors.append(f"Occurrence at {format_utc_iso8601(occurrence.start_utc)} ends before it starts")
            break

    return (len(errors) == 0, errors)


def _parse_override(data: dict[str, Any]) -> ScheduleOverride:
    kind = data.get("kind")
    if kind == "move":
        origin = data.get("from", data.get("date"))
        if origin is None or "to_date" not in data or "to_time" not in data:
            raise ScheduleError("Override 'move' needs 'from', 'to_date' and 'to_time'")
        return ScheduleOverride(
            kind="move",
            date=_parse_date(origin),
            to_date=_parse_date(data["to_date"]),
            time=_parse_time(data["to_time"]),
        )

    if "date" not in data:
        raise ScheduleError(f"Override {kind!r} needs a 'date'")
    return ScheduleOverride(
        kind=kind,
        date=_parse_date(data["date"]),
        time=_parse_time(data["time"]) if data.get("time") is not None else None,
    )


def parse_schedule(data: dict[str, Any]) -> GoalSchedule:
    """Build a GoalSchedule from a YAML/JSON-shaped mapping.

    Expected shape::

        timezone: Asia/Seoul
        period: {start: 2025-10-01, end: 2025-10-14}
        default_duration_min: 60
        rules:
          - {weekdays: [mon, wed, fri], time: "19:00"}
        overrides:
          - {kind: cancel, date: 2025-10-03}
          - {kind: move, from: 2025-10-06, to_date: 2025-10-07, to_time: "20:00"}

    Raises
    ------
    ScheduleError
        If the mapping is malformed
    """
    if not isinstance(data, dict):
        raise ScheduleError("Schedule must be a mapping")

    period = data.get("period")
    if not isinstance(period, dict) or "start" not in period or "end" not in period:
        raise ScheduleError("Schedule needs 'period' with 'start' and 'end'")

    period_start = _parse_date(period["start"])
    period_end = _parse_date(period["end"])
    if period_start > period_end:
        raise ScheduleError("Schedule period start must be on or before its end")

    raw_rules = data.get("rules") or []
    if not isinstance(raw_rules, list):
        raise ScheduleError("'rules' must be a list")

    rules = []
    for raw_rule in raw_rules:
        weekdays = raw_rule.get("weekdays") if isinstance(raw_rule, dict) else None
        if not weekdays or not isinstance(weekdays, list):
            raise ScheduleError("Each rule needs a non-empty 'weekdays' list")
        rules.append(
            ScheduleRule(
                weekdays=frozenset(_parse_weekday(day) for day in weekdays),
                time=_parse_time(raw_rule.get("time") or DEFAULT_RULE_TIME),
            )
        )

    raw_overrides = data.get("overrides") or []
    if not isinstance(raw_overrides, list):
        raise ScheduleError("'overrides' must be a list")

    overrides = []
    for raw_override in raw_overrides:
        if not isinstance(raw_override, dict):
            raise ScheduleError("Each override must be a mapping")
        overrides.append(_parse_override(raw_override))

    duration = data.get("default_duration_min", DEFAULT_DURATION_MIN)
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
        raise ScheduleError(f"Invalid default_duration_min: {duration!r}")

    tz_name = data.get("timezone") or TimeConfig.get_default_timezone_name()
    try:
        _schedule_timezone(tz_name)
    except ValueError as exc:
        raise ScheduleError(str(exc)) from exc

    return GoalSchedule(
        period_start=period_start,
        period_end=period_end,
        rules=tuple(rules),
        overrides=tuple(overrides),
        timezone=tz_name,
        # 0 means the default, as for an absent value
        default_duration_min=duration or DEFAULT_DURATION_MIN,
    )
