#!/usr/bin/env python3
"""Main CLI module for Cadence."""

from __future__ import annotations

import sys

import click

from ..config.settings import ConfigError, load_settings
from ..observability import configure_loguru
from .cadence_rollup import aggregate_command, weeks_command
from .cadence_schedule import occurrences_command
from .cli_common import ExitCode

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
EPILOG = """
Examples:
  cadence weeks --start 2025-09-08 --end 2025-09-21T23:59:59
  cadence aggregate --records verifications.json --target 3 \\
      --start 2025-09-08T00:00:00+09:00 --end 2025-09-21T23:59:59+09:00
  cadence occurrences --schedule gym.yaml --preview
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="Cadence - weekly schedule compliance for habit goals",
    epilog=EPILOG,
)
def cli() -> None:
    """Root CLI command."""


cli.add_command(weeks_command)
cli.add_command(aggregate_command)
cli.add_command(occurrences_command)


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    if args is None:
        args = sys.argv[1:]

    try:
        settings = load_settings()
    except ConfigError as exc:
        click.echo(f"❌ {exc}", err=True)
        return int(ExitCode.CONFIG_ERROR)

    configure_loguru(log_dir=settings.log_dir, level=settings.log_level)

    try:
        return int(cli.main(args=list(args), prog_name="cadence", standalone_mode=False) or 0)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except SystemExit as exc:
        return int(exc.code) if exc.code is not None else 0


if __name__ == "__main__":
    sys.exit(main())
