"""Tests for loguru configuration and timing records."""

from __future__ import annotations

import json

from loguru import logger

from cadence.observability import COMPONENTS, configure_loguru, get_logger, timing_context
from cadence.rollups.aggregator import aggregate_frequency


def _read_jsonl(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def test_package_logs_are_silent_until_configured():
    logger.remove()
    sink: list[str] = []
    logger.add(sink.append, level="DEBUG")

    aggregate_frequency([], 1, 1757257200000, 1758466799000)

    assert sink == []


def test_configure_writes_jsonl(tmp_path):
    log_dir = tmp_path / "logs"

    handler_ids = configure_loguru(log_dir=log_dir, level="DEBUG", enable_console=False)
    aggregate_frequency([], 1, 1757257200000, 1758466799000)
    logger.remove()

    assert len(handler_ids) == 2
    records = _read_jsonl(log_dir / "cadence.jsonl")
    week_records = [r["record"] for r in records if r["record"]["message"] == "Week aggregated"]
    assert len(week_records) == 2
    assert week_records[0]["extra"]["component"] == "aggregation"
    assert week_records[0]["extra"]["week_key"] == "2025-09-08_to_2025-09-14"


def test_level_filters_file_sink(tmp_path):
    configure_loguru(log_dir=tmp_path, level="INFO", enable_console=False)

    get_logger("rollups").debug("hidden")
    get_logger("rollups").info("shown")
    logger.remove()

    messages = [r["record"]["message"] for r in _read_jsonl(tmp_path / "cadence.jsonl")]
    assert messages == ["shown"]


def test_console_sink_only_without_log_dir(tmp_path):
    handler_ids = configure_loguru(level="INFO")

    assert len(handler_ids) == 1
    assert not any(tmp_path.iterdir())


def test_timing_context_logs_duration(tmp_path):
    configure_loguru(log_dir=tmp_path, level="INFO", enable_console=False)

    with timing_context("slice_complete_weeks", component="rollups", trace_id="trace-1") as ctx:
        ctx["weeks"] = 2
    logger.remove()

    timing = [r["record"] for r in _read_jsonl(tmp_path / "timing.jsonl")]
    assert [r["extra"]["phase"] for r in timing] == ["start", "end"]
    end = timing[1]["extra"]
    assert end["operation"] == "slice_complete_weeks"
    assert end["component"] == "rollups"
    assert end["trace_id"] == "trace-1"
    assert end["weeks"] == 2
    assert end["duration_ns"] >= 0


def test_get_logger_binds_component():
    sink: list = []
    logger.remove()
    logger.add(lambda message: sink.append(message.record), level="DEBUG")
    logger.enable("cadence")

    get_logger("schedule").info("bound")

    assert sink[0]["extra"]["component"] == "schedule"


def test_components():
    assert set(COMPONENTS) == {"rollups", "aggregation", "schedule", "cli"}
