"""CLI commands for complete-week slicing and frequency reports."""

from __future__ import annotations

from pathlib import Path

import click

from ..config.settings import ConfigError, get_settings
from ..core.models import VerificationRecord
from ..core.time import TimeConfig, epoch_ms_to_datetime, parse_instant_ms, resolve_timezone
from ..observability import get_logger, timing_context
from ..rollups.aggregator import aggregate_frequency
from ..rollups.time_windows import slice_complete_weeks
from .cli_common import CLIContext, ExitCode, load_json_file

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_log = get_logger("cli")


def _resolve_range(start: str, end: str, tz: str | None) -> tuple[str, int, int]:
    tz_name = tz or TimeConfig.get_default_timezone_name()
    resolve_timezone(tz_name)
    return tz_name, parse_instant_ms(start, tz_name), parse_instant_ms(end, tz_name)


def _default_target() -> int:
    try:
        return get_settings().default_week_target
    except ConfigError:
        return 3


def _load_records(path: Path) -> list[VerificationRecord]:
    data = load_json_file(path)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of verification records")
    records = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Record #{index} in {path} is not an object")
        records.append(VerificationRecord.from_dict(item))
    return records


@click.command("weeks", context_settings=CONTEXT_SETTINGS, help="List complete Monday-Sunday weeks in a range")
@click.option("--start", required=True, help="Range start (ISO-8601; no offset means reference timezone)")
@click.option("--end", required=True, help="Range end (ISO-8601, inclusive)")
@click.option("--tz", "tz", default=None, help="IANA timezone (default: reference timezone)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON (machine-readable)")
def weeks_command(start: str, end: str, tz: str | None, json_output: bool) -> int:
    """Slice a range into complete weeks."""
    ctx = CLIContext(json_output=json_output)

    try:
        tz_name, start_ms, end_ms = _resolve_range(start, end, tz)
    except ValueError as exc:
        return ctx.fail(str(exc), ExitCode.VALIDATION_ERROR)

    windows = slice_complete_weeks(start_ms, end_ms, tz_name)
    _log.info("Weeks listed", trace_id=ctx.trace_id, weeks=len(windows))

    lines = [f"📅 {len(windows)} complete week(s) in {tz_name}"]
    for window in windows:
        marker = " (DST change)" if window.has_dst_transition else ""
        lines.append(f"  - {window.week_key}{marker}")

    ctx.output({"timezone": tz_name, "weeks": [window.to_dict() for window in windows]}, lines)
    return ExitCode.SUCCESS


@click.command("aggregate", context_settings=CONTEXT_SETTINGS, help="Weekly frequency report for verification records")
@click.option(
    "--records",
    "records_path",
    required=True,
    type=click.Path(path_type=Path),
    help="JSON file with a list of verification records",
)
@click.option("--target", type=int, default=None, help="Distinct verified days required per week")
@click.option("--start", required=True, help="Range start (ISO-8601; no offset means reference timezone)")
@click.option("--end", required=True, help="Range end (ISO-8601, inclusive)")
@click.option("--tz", "tz", default=None, help="IANA timezone (default: reference timezone)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON (machine-readable)")
def aggregate_command(
    records_path: Path,
    target: int | None,
    start: str,
    end: str,
    tz: str | None,
    json_output: bool,
) -> int:
    """Aggregate verification records into weekly verdicts."""
    ctx = CLIContext(json_output=json_output)

    try:
        records = _load_records(records_path)
    except OSError as exc:
        return ctx.fail(f"Cannot read records: {exc}", ExitCode.IO_ERROR)
    except ValueError as exc:
        return ctx.fail(f"Invalid records: {exc}", ExitCode.VALIDATION_ERROR)

    try:
        tz_name, start_ms, end_ms = _resolve_range(start, end, tz)
        with timing_context("aggregate_frequency", component="aggregation", trace_id=ctx.trace_id) as timing:
            report = aggregate_frequency(
                records,
                target if target is not None else _default_target(),
                start_ms,
                end_ms,
                timezone_str=tz_name,
            )
            timing["weeks"] = report.total_weeks
    except ValueError as exc:
        # InvalidArgumentError, unknown timezone, unparseable instants
        return ctx.fail(str(exc), ExitCode.VALIDATION_ERROR)

    lines = []
    for result in report.week_results:
        status = "✅" if result.passed else "❌"
        days = ", ".join(day.isoformat() for day in result.verification_days) or "-"
        lines.append(f"{status} {result.week_key}: {result.count}/{result.target} ({days})")
    verdict = "✅ PASS" if report.overall_pass else "❌ FAIL"
    lines.append(f"{verdict}: {report.reason}")
    lines.append(f"   Range: {epoch_ms_to_datetime(start_ms, tz_name).isoformat()} .. {epoch_ms_to_datetime(end_ms, tz_name).isoformat()}")

    ctx.output(report.to_dict(), lines)
    return ExitCode.SUCCESS
