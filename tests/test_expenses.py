"""Tests for per-entry expense totals."""

import pytest
from decimal import Decimal

from timesheet_tool.engine.expenses import expense_total, parse_amount, sum_expenses
from timesheet_tool.models import TimeEntry


class TestParseAmount:
    def test_numbers(self):
        assert parse_amount("150") == Decimal("150")
        assert parse_amount(" 12.5 ") == Decimal("12.5")

    @pytest.mark.parametrize("value", [None, "", "  ", "abc", "12abc", "NaN", "Infinity", "-inf"])
    def test_unusable_is_zero(self, value):
        assert parse_amount(value) == Decimal("0")


class TestExpenseTotal:
    def test_all_blank(self):
        assert expense_total(TimeEntry()) == "0.00"

    def test_sums_six_fields(self):
        entry = TimeEntry(
            expense_breakfast="50",
            expense_lunch="100",
            expense_dinner="120.50",
            expense_transport="30",
            expense_lodging="1500",
            expense_others="9.5",
        )
        assert expense_total(entry) == "1810.00"

    def test_invalid_fields_count_as_zero(self):
        entry = TimeEntry(expense_breakfast="50", expense_lunch="lots", expense_dinner="NaN")
        assert expense_total(entry) == "50.00"

    def test_remarks_and_travel_hours_ignored(self):
        entry = TimeEntry(expense_others="10", expense_remarks="99", travel_hours="3")
        assert sum_expenses(entry) == Decimal("10")

    def test_large_amounts_do_not_overflow_precision(self):
        entry = TimeEntry(expense_lodging="1e30")
        assert expense_total(entry) == "1" + "0" * 30 + ".00"

    def test_thirty_digit_amount(self):
        entry = TimeEntry(expense_breakfast="123456789012345678901234567890")
        total = expense_total(entry)
        assert total.startswith("1234567890123456789012345")
        assert total.endswith(".00")

    @pytest.mark.parametrize("value", ["1e999999", "1e-999999"])
    def test_absurd_exponent_is_zero(self, value):
        assert parse_amount(value) == Decimal("0")
