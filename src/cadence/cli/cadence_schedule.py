"""CLI command for expanding goal schedules into occurrences."""

from __future__ import annotations

from pathlib import Path

import click
import yaml

from ..observability import get_logger
from ..schedule.compute import (
    ScheduleError,
    build_occurrences,
    parse_schedule,
    preview_occurrences,
    validate_occurrences,
)
from .cli_common import CLIContext, ExitCode, load_yaml_file

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_log = get_logger("cli")


@click.command("occurrences", context_settings=CONTEXT_SETTINGS, help="Expand a YAML goal schedule into occurrences")
@click.option(
    "--schedule",
    "schedule_path",
    required=True,
    type=click.Path(path_type=Path),
    help="YAML file with period, rules and overrides",
)
@click.option("--preview", is_flag=True, help="Show local dates and times instead of UTC slots")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON (machine-readable)")
def occurrences_command(schedule_path: Path, preview: bool, json_output: bool) -> int:
    """Expand schedule rules and overrides."""
    ctx = CLIContext(json_output=json_output)

    try:
        schedule = parse_schedule(load_yaml_file(schedule_path))
    except OSError as exc:
        return ctx.fail(f"Cannot read schedule: {exc}", ExitCode.IO_ERROR)
    except (ScheduleError, yaml.YAMLError) as exc:
        return ctx.fail(f"Invalid schedule: {exc}", ExitCode.VALIDATION_ERROR)

    if preview:
        try:
            previews = preview_occurrences(schedule)
        except ValueError as exc:
            return ctx.fail(str(exc), ExitCode.VALIDATION_ERROR)
        lines = [f"📅 {len(previews)} occurrence(s) in {schedule.timezone}"]
        lines.extend(f"  - W{p.week_number} {p.date.isoformat()} {p.day_name} {p.time}" for p in previews)
        ctx.output([p.to_dict() for p in previews], lines)
        return ExitCode.SUCCESS

    try:
        occurrences = build_occurrences(schedule)
    except ValueError as exc:
        return ctx.fail(str(exc), ExitCode.VALIDATION_ERROR)

    valid, errors = validate_occurrences(occurrences)
    if not valid:
        _log.warning("Schedule produced invalid occurrences", trace_id=ctx.trace_id, errors=errors)
        return ctx.fail("; ".join(errors), ExitCode.VALIDATION_ERROR)

    lines = [f"📅 {len(occurrences)} occurrence(s) (UTC)"]
    lines.extend(f"  - {o.to_dict()['start']} .. {o.to_dict()['end']}" for o in occurrences)
    ctx.output([o.to_dict() for o in occurrences], lines)
    return ExitCode.SUCCESS
