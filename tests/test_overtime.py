"""Tests for regular/overtime splitting."""

import pytest
from decimal import Decimal

from timesheet_tool.engine.overtime import (
    OvertimeSplit,
    format_hours,
    is_overnight,
    parse_clock,
    split_overtime,
    worked_hours,
)


class TestParseClock:
    def test_valid_times(self):
        assert parse_clock("00:00") == 0
        assert parse_clock("08:00") == 480
        assert parse_clock("17:30") == 1050
        assert parse_clock("7:05") == 425

    def test_seconds_ignored(self):
        assert parse_clock("09:15:00") == 555

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        assert parse_clock(value) is None

    @pytest.mark.parametrize("value", ["abc", "24:00", "12:60", "1200", "12:5"])
    def test_malformed(self, value):
        assert parse_clock(value) is None


class TestSplitOvertime:
    def test_within_window(self):
        result = split_overtime("09:00", "12:00")
        assert result.regular_hours == Decimal("3")
        assert result.overtime_hours == Decimal("0")

    def test_straddles_both_boundaries(self):
        # 07:00-08:00 and 17:00-19:00 are overtime
        result = split_overtime("07:00", "19:00")
        assert result.regular_hours == Decimal("9")
        assert result.overtime_hours == Decimal("3")

    def test_entirely_after_window(self):
        result = split_overtime("18:00", "22:00")
        assert result.regular_hours == Decimal("0")
        assert result.overtime_hours == Decimal("4")

    def test_entirely_before_window(self):
        result = split_overtime("05:00", "07:30")
        assert result.regular_hours == Decimal("0")
        assert result.overtime_hours == Decimal("2.5")

    def test_overnight_wrap(self):
        result = split_overtime("22:00", "02:00")
        assert result.regular_hours == Decimal("0")
        assert result.overtime_hours == Decimal("4")

    def test_overnight_into_next_morning_window(self):
        # Wrapped stop lands at 33:00; the window is not repeated for the next day
        result = split_overtime("16:00", "09:00")
        assert result.regular_hours == Decimal("1")
        assert result.overtime_hours == Decimal("16")

    def test_equal_times_is_full_day(self):
        result = split_overtime("08:00", "08:00")
        assert result.regular_hours == Decimal("9")
        assert result.overtime_hours == Decimal("15")

    def test_exact_window(self):
        result = split_overtime("08:00", "17:00")
        assert result.regular_hours == Decimal("9")
        assert result.overtime_hours == Decimal("0")

    def test_fractional_hours_not_rounded(self):
        result = split_overtime("08:00", "08:20")
        assert result.regular_hours == Decimal(20) / Decimal(60)
        assert format_hours(result.regular_hours) == "0.33"

    @pytest.mark.parametrize("start,stop", [("", "17:00"), ("08:00", ""), ("", ""), (None, None)])
    def test_missing_time_zero_split(self, start, stop):
        result = split_overtime(start, stop)
        assert result == OvertimeSplit(Decimal("0"), Decimal("0"))

    def test_malformed_time_zero_split(self):
        result = split_overtime("nine", "17:00")
        assert result.total_hours == Decimal("0")

    def test_never_negative(self):
        for start in ("00:00", "06:30", "08:00", "12:00", "16:59", "23:59"):
            for stop in ("00:00", "07:59", "08:01", "17:00", "18:15", "23:59"):
                result = split_overtime(start, stop)
                assert result.regular_hours >= 0
                assert result.overtime_hours >= 0


class TestHelpers:
    def test_worked_hours(self):
        assert worked_hours("22:00", "06:00") == Decimal("8")

    def test_is_overnight(self):
        assert is_overnight("22:00", "02:00")
        assert is_overnight("08:00", "08:00")
        assert not is_overnight("08:00", "17:00")
        assert not is_overnight("", "17:00")

    def test_format_hours_half_up(self):
        assert format_hours(Decimal("1.005")) == "1.01"
        assert format_hours(Decimal("9")) == "9.00"

    def test_format_hours_beyond_default_precision(self):
        assert format_hours(Decimal("1e40")) == "1" + "0" * 40 + ".00"
