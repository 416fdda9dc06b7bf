"""Shared fixtures."""

from __future__ import annotations

import pytest
from loguru import logger

from cadence.core.time import TimeConfig, parse_instant_ms


@pytest.fixture(autouse=True)
def reset_global_state():
    """Restore the reference timezone and silence cadence logs after each test."""
    TimeConfig.reset()
    yield
    TimeConfig.reset()
    logger.remove()
    logger.disable("cadence")


@pytest.fixture
def kst():
    """Parse ISO-8601 wall time in Asia/Seoul to epoch milliseconds."""

    def _parse(value: str) -> int:
        return parse_instant_ms(value, "Asia/Seoul")

    return _parse
