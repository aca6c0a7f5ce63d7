"""Work-hours calculator tests — day shifts, overnight wrap, missing and
malformed clock times."""

from __future__ import annotations

from datetime import time

import pytest

from workforce.attendance.work_hours import compute_work_hours, parse_time


# ═════════════════════════════════════════════════════════════════════
# 1. parse_time
# ═════════════════════════════════════════════════════════════════════


def test_parse_time_accepts_hh_mm():
    assert parse_time("09:30") == time(9, 30)


def test_parse_time_passes_time_objects_through():
    assert parse_time(time(22, 0)) == time(22, 0)


@pytest.mark.parametrize("value", [None, "", "   ", "9am", "25:00", "12:61", "noon"])
def test_parse_time_returns_none_for_blank_or_malformed(value):
    assert parse_time(value) is None


# ═════════════════════════════════════════════════════════════════════
# 2. compute_work_hours
# ═════════════════════════════════════════════════════════════════════


def test_day_shift():
    assert compute_work_hours("09:00", "17:00") == 8.0


def test_overnight_shift_wraps_past_midnight():
    assert compute_work_hours("22:00", "06:00") == 8.0


def test_equal_times_count_as_full_day():
    assert compute_work_hours("10:00", "10:00") == 24.0


def test_partial_hours_rounded_to_two_decimals():
    # 09:10 → 17:00 is 7h50m = 7.8333…
    assert compute_work_hours("09:10", "17:00") == 7.83


def test_missing_in_time_gives_none():
    assert compute_work_hours(None, "17:00") is None


def test_missing_out_time_gives_none():
    assert compute_work_hours("09:00", None) is None
    assert compute_work_hours("09:00", "") is None


def test_malformed_time_gives_none_without_raising():
    assert compute_work_hours("nine", "17:00") is None


def test_time_objects_accepted():
    assert compute_work_hours(time(8, 30), time(12, 0)) == 3.5
