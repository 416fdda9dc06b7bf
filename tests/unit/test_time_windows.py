"""Tests for complete-week slicing.

Every window is a full Monday-Sunday local week inside the range; partial
weeks at either boundary are dropped.
"""

from datetime import date, datetime, timedelta

import pytest

from cadence.core.time import epoch_ms_to_datetime
from cadence.rollups.time_windows import (
    WEEK_SPAN_MS,
    WeekWindow,
    count_complete_weeks,
    get_first_complete_week,
    get_last_complete_week,
    get_week_start,
    has_complete_weeks,
    local_midnight_ms,
    slice_complete_weeks,
    slice_date_blocks,
)

DAY_MS = 24 * 60 * 60 * 1000

# 2025-09-08T00:00:00+09:00 (Monday) .. 2025-09-21T23:59:59+09:00 (Sunday)
TWO_WEEKS_START = 1757257200000
TWO_WEEKS_END = 1758466799000


def test_get_week_start_monday():
    # Wednesday, Oct 8, 2025
    dt = datetime(2025, 10, 8, 15, 30, 0)

    start = get_week_start(dt, start_on=0)

    assert start.weekday() == 0
    assert start.day == 6
    assert start.hour == 15  # Same time as input
    assert start.minute == 30


def test_get_week_start_sunday():
    dt = datetime(2025, 10, 8, 10, 0, 0)

    start = get_week_start(dt, start_on=6)

    assert start.weekday() == 6
    assert start.day == 5


def test_local_midnight_ms():
    assert local_midnight_ms(date(2025, 9, 8), "Asia/Seoul") == TWO_WEEKS_START
    assert local_midnight_ms(date(1970, 1, 1), "UTC") == 0


def test_two_week_range():
    weeks = slice_complete_weeks(TWO_WEEKS_START, TWO_WEEKS_END, "Asia/Seoul")

    assert [w.week_key for w in weeks] == ["2025-09-08_to_2025-09-14", "2025-09-15_to_2025-09-21"]
    assert weeks[0].start_ms == TWO_WEEKS_START
    assert weeks[0].end_ms == TWO_WEEKS_START + WEEK_SPAN_MS
    assert weeks[1].start_ms == weeks[0].end_ms + 1
    assert all(w.timezone_name == "Asia/Seoul" for w in weeks)


def test_defaults_to_reference_timezone():
    assert slice_complete_weeks(TWO_WEEKS_START, TWO_WEEKS_END) == slice_complete_weeks(
        TWO_WEEKS_START, TWO_WEEKS_END, "Asia/Seoul"
    )


@pytest.mark.parametrize(
    ("start_iso", "end_iso"),
    [
        ("2025-09-03T12:00:00+09:00", "2025-09-24T08:00:00+09:00"),
        ("2025-01-01T00:00:00+09:00", "2025-12-31T23:59:59+09:00"),
        ("2024-02-26T00:00:00+09:00", "2024-03-10T23:59:59.999+09:00"),
    ],
)
def test_window_completeness_and_order(kst, start_iso, end_iso):
    range_start, range_end = kst(start_iso), kst(end_iso)

    weeks = slice_complete_weeks(range_start, range_end, "Asia/Seoul")

    assert weeks
    for window in weeks:
        local_start = epoch_ms_to_datetime(window.start_ms, "Asia/Seoul")
        local_end = epoch_ms_to_datetime(window.end_ms, "Asia/Seoul")

        assert window.end_ms - window.start_ms == WEEK_SPAN_MS
        assert local_start.weekday() == 0
        assert (local_start.hour, local_start.minute, local_start.second, local_start.microsecond) == (0, 0, 0, 0)
        assert local_end.weekday() == 6
        assert (local_end.hour, local_end.minute, local_end.second, local_end.microsecond) == (23, 59, 59, 999000)
        assert window.start_ms >= range_start
        assert window.end_ms <= range_end // 1000 * 1000 + 999
        assert window.week_start_date == local_start.date()
        assert window.week_end_date == local_end.date()

    for earlier, later in zip(weeks, weeks[1:]):
        assert earlier.end_ms < later.start_ms
        assert later.start_ms == earlier.end_ms + 1


def test_mid_week_range_keeps_only_inner_weeks(kst):
    # Wednesday to Wednesday three weeks later
    weeks = slice_complete_weeks(kst("2025-09-03T12:00:00"), kst("2025-09-24T12:00:00"), "Asia/Seoul")

    assert [w.week_start_date for w in weeks] == [date(2025, 9, 8), date(2025, 9, 15)]


@pytest.mark.parametrize("offset_hours", [0, 1, 13, 24, 36, 71, 100, 150, 167])
def test_short_range_is_empty(offset_hours):
    t = TWO_WEEKS_START + offset_hours * 60 * 60 * 1000

    assert slice_complete_weeks(t, t + 6 * DAY_MS, "Asia/Seoul") == []


def test_start_exactly_monday_midnight_is_included():
    weeks = slice_complete_weeks(TWO_WEEKS_START, TWO_WEEKS_START + WEEK_SPAN_MS, "Asia/Seoul")

    assert len(weeks) == 1
    assert weeks[0].start_ms == TWO_WEEKS_START


def test_start_after_monday_midnight_skips_week():
    weeks = slice_complete_weeks(TWO_WEEKS_START + 1, TWO_WEEKS_END, "Asia/Seoul")

    assert [w.week_key for w in weeks] == ["2025-09-15_to_2025-09-21"]


def test_sunday_start_advances_one_day(kst):
    weeks = slice_complete_weeks(kst("2025-09-07T18:00:00"), TWO_WEEKS_END, "Asia/Seoul")

    assert weeks[0].week_start_date == date(2025, 9, 8)


class TestRangeEndBoundary:
    def test_end_at_last_millisecond_includes_week(self):
        week_end = TWO_WEEKS_START + WEEK_SPAN_MS

        assert len(slice_complete_weeks(TWO_WEEKS_START, week_end, "Asia/Seoul")) == 1

    def test_end_at_last_whole_second_includes_week(self):
        # Sunday 23:59:59.000 covers the rest of that second
        week_end_second = TWO_WEEKS_START + WEEK_SPAN_MS - 999

        assert len(slice_complete_weeks(TWO_WEEKS_START, week_end_second, "Asia/Seoul")) == 1

    def test_end_one_second_early_excludes_week(self):
        week_end = TWO_WEEKS_START + WEEK_SPAN_MS

        assert slice_complete_weeks(TWO_WEEKS_START, week_end - 1000, "Asia/Seoul") == []


class TestMalformedRanges:
    def test_inverted_range(self):
        assert slice_complete_weeks(TWO_WEEKS_END, TWO_WEEKS_START, "Asia/Seoul") == []

    @pytest.mark.parametrize(
        ("start", "end"),
        [
            (float("nan"), TWO_WEEKS_END),
            (TWO_WEEKS_START, float("nan")),
            (float("-inf"), float("inf")),
            (None, TWO_WEEKS_END),
            (True, TWO_WEEKS_END),
            (TWO_WEEKS_START, 10**20),
        ],
    )
    def test_malformed_instants_yield_nothing(self, start, end):
        assert slice_complete_weeks(start, end, "Asia/Seoul") == []

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="Invalid timezone"):
            slice_complete_weeks(TWO_WEEKS_START, TWO_WEEKS_END, "Mars/Olympus")


def test_slicing_is_restartable():
    first = slice_complete_weeks(TWO_WEEKS_START, TWO_WEEKS_END, "Asia/Seoul")
    second = slice_complete_weeks(TWO_WEEKS_START, TWO_WEEKS_END, "Asia/Seoul")

    assert first == second
    assert first is not second


def test_dst_week_is_aligned_to_local_midnights(kst):
    # Week of Mon 2025-03-03 contains the spring-forward Sunday (March 9) in New York
    from cadence.core.time import parse_instant_ms

    start = parse_instant_ms("2025-03-03T00:00:00", "America/New_York")
    end = parse_instant_ms("2025-03-16T23:59:59.999", "America/New_York")

    weeks = slice_complete_weeks(start, end, "America/New_York")

    assert [w.week_start_date for w in weeks] == [date(2025, 3, 3), date(2025, 3, 10)]
    assert weeks[0].has_dst_transition
    assert weeks[0].end_ms - weeks[0].start_ms == WEEK_SPAN_MS - 60 * 60 * 1000
    assert not weeks[1].has_dst_transition
    assert weeks[1].end_ms - weeks[1].start_ms == WEEK_SPAN_MS


def test_week_window_helpers():
    window = slice_complete_weeks(TWO_WEEKS_START, TWO_WEEKS_END, "Asia/Seoul")[0]

    assert isinstance(window, WeekWindow)
    assert window.contains(window.start_ms)
    assert window.contains(window.end_ms)
    assert not window.contains(window.end_ms + 1)
    assert not window.contains(window.start_ms - 1)

    data = window.to_dict()
    assert data["week_key"] == "2025-09-08_to_2025-09-14"
    assert data["start_utc"] == "2025-09-07T15:00:00+00:00"
    assert data["end_utc"] == "2025-09-14T14:59:59.999000+00:00"
    assert data["has_dst_transition"] is False


class TestDateBlocks:
    def test_two_blocks(self):
        blocks = slice_date_blocks("2025-10-01", "2025-10-14")

        assert blocks == [
            (date(2025, 10, 1), date(2025, 10, 7)),
            (date(2025, 10, 8), date(2025, 10, 14)),
        ]

    def test_trailing_partial_block_dropped(self):
        assert slice_date_blocks(date(2025, 10, 1), date(2025, 10, 20)) == [
            (date(2025, 10, 1), date(2025, 10, 7)),
            (date(2025, 10, 8), date(2025, 10, 14)),
        ]

    def test_short_range(self):
        assert slice_date_blocks("2025-10-01", "2025-10-06") == []
        assert not has_complete_weeks("2025-10-01", "2025-10-06")
        assert get_first_complete_week("2025-10-01", "2025-10-06") is None
        assert get_last_complete_week("2025-10-01", "2025-10-06") is None

    def test_helpers(self):
        assert count_complete_weeks("2025-10-01", "2025-10-21") == 3
        assert has_complete_weeks("2025-10-01", "2025-10-07")
        assert get_first_complete_week("2025-10-01", "2025-10-21") == (date(2025, 10, 1), date(2025, 10, 7))
        assert get_last_complete_week("2025-10-01", "2025-10-21") == (date(2025, 10, 15), date(2025, 10, 21))

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="YYYY-MM-DD"):
            slice_date_blocks("10/01/2025", "2025-10-14")

    def test_start_after_end(self):
        with pytest.raises(ValueError, match="before or equal"):
            slice_date_blocks("2025-10-14", "2025-10-01")

    def test_week_start_offsets(self):
        blocks = slice_date_blocks("2025-10-01", "2025-10-31")
        assert all(end - start == timedelta(days=6) for start, end in blocks)
