"""Loguru configuration with timing support.

This module provides centralized loguru configuration with:
- Colored console output and structured JSON log files
- Component-bound loggers (rollups, aggregation, schedule, cli)
- Context manager for timing operations

The ``cadence`` package disables its own log records on import; an
application opts in by calling :func:`configure_loguru`.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "COMPONENTS",
    "configure_loguru",
    "get_logger",
    "timing_context",
]

COMPONENTS = ("rollups", "aggregation", "schedule", "cli")


def configure_loguru(
    *,
    log_dir: Path | None = None,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "10 days",
    enable_console: bool = True,
) -> list[int]:
    """Configure loguru sinks and enable ``cadence`` log records.

    Parameters
    ----------
    log_dir
        Directory for JSONL log files (no file sinks when None)
    level
        Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    rotation
        Log rotation policy (e.g., "10 MB", "1 day")
    retention
        Log retention policy (e.g., "10 days", "1 week")
    enable_console
        Enable stderr output

    Returns
    -------
    list[int]
        Handler ids that were added

    Example
    -------
    >>> configure_loguru(log_dir=Path("logs"), level="DEBUG")
    """
    logger.remove()
    handler_ids: list[int] = []

    if enable_console:
        handler_ids.append(
            logger.add(
                sys.stderr,
                format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[component]}</cyan> | "
                "<level>{message}</level>",
                level=level,
                colorize=True,
                backtrace=False,
                diagnose=False,
                filter=_with_component,
            )
        )

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

        handler_ids.append(
            logger.add(
                log_dir / "cadence.jsonl",
                format="{message}",
                level=level,
                rotation=rotation,
                retention=retention,
                serialize=True,
                filter=_with_component,
            )
        )

        # Timing records go to their own file regardless of level
        handler_ids.append(
            logger.add(
                log_dir / "timing.jsonl",
                format="{message}",
                level="DEBUG",
                rotation=rotation,
                retention=retention,
                serialize=True,
                filter=lambda record: record["extra"].get("timing", False),
            )
        )

    logger.enable("cadence")
    logger.bind(component="cli").debug("Loguru configured", log_dir=str(log_dir), level=level)
    return handler_ids


def _with_component(record: dict[str, Any]) -> bool:
    record["extra"].setdefault("component", "cadence")
    return True


def get_logger(component: str = "cadence") -> Any:
    """Get logger instance bound to a component.

    Parameters
    ----------
    component
        Component name (rollups, aggregation, schedule, cli)

    Returns
    -------
    Logger
        Loguru logger bound to component
    """
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "cadence",
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Time a block and log START/END records with the duration.

    Yields
    ------
    dict
        Context dictionary; keys added inside the block are logged at END

    Example
    -------
    >>> with timing_context("aggregate_frequency", component="aggregation") as ctx:
    ...     report = aggregate_frequency(records, 3, start_ms, end_ms)
    ...     ctx["weeks"] = report.total_weeks
    """
    start_ns = time.perf_counter_ns()
    context: dict[str, Any] = dict(metadata)
    bound = logger.bind(component=component, timing=True, operation=operation)

    bound.debug(f"START: {operation}", phase="start", **metadata)

    try:
        yield context
    finally:
        duration_ns = time.perf_counter_ns() - start_ns
        bound.debug(
            f"END: {operation}",
            phase="end",
            duration_ms=duration_ns / 1_000_000,
            duration_ns=duration_ns,
            **context,
        )
