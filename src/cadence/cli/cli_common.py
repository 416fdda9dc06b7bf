"""Common CLI utilities: JSON output, stable exit codes, trace ids."""

from __future__ import annotations

import json
import uuid
from enum import IntEnum
from pathlib import Path
from typing import Any

import click
import yaml

__all__ = [
    "CLIContext",
    "ExitCode",
    "load_json_file",
    "load_yaml_file",
]


class ExitCode(IntEnum):
    """Stable exit codes for CLI commands."""

    SUCCESS = 0  # Successful execution
    VALIDATION_ERROR = 2  # Invalid arguments or input documents
    IO_ERROR = 5  # Input file missing or unreadable
    CONFIG_ERROR = 6  # Configuration error
    UNKNOWN_ERROR = 7  # Unknown/unexpected error


class CLIContext:
    """Context for CLI execution with JSON output and a trace id."""

    def __init__(self, json_output: bool = False, trace_id: str | None = None, verbose: bool = False):
        self.json_output = json_output
        self.trace_id = trace_id or f"trace-{uuid.uuid4().hex[:12]}"
        self.verbose = verbose

    def output(self, data: Any, lines: list[str] | None = None) -> None:
        """Print a successful result.

        Args:
            data: JSON-safe result data (used in --json mode)
            lines: Human-readable lines (used otherwise)
        """
        if self.json_output:
            result = {"status": "success", "trace_id": self.trace_id, "data": data}
            click.echo(json.dumps(result, ensure_ascii=False, indent=2))
        else:
            for line in lines or []:
                click.echo(line)

    def fail(self, error: str, code: ExitCode) -> int:
        """Print an error and return its exit code."""
        if self.json_output:
            result = {
                "status": "error",
                "trace_id": self.trace_id,
                "error": error,
                "exit_code": int(code),
            }
            click.echo(json.dumps(result, ensure_ascii=False, indent=2))
        else:
            click.echo(f"❌ {error}", err=True)
        return int(code)


def load_json_file(path: Path) -> Any:
    """Read a JSON document.

    Raises
    ------
    OSError
        If the file cannot be read
    ValueError
        If the content is not valid JSON
    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_yaml_file(path: Path) -> Any:
    """Read a YAML document.

    Raises
    ------
    OSError
        If the file cannot be read
    yaml.YAMLError
        If the content is not valid YAML
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)
