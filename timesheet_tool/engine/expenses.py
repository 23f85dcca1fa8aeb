"""Per-entry expense totals."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from timesheet_tool.engine.overtime import format_hours
from timesheet_tool.models import EXPENSE_FIELDS, TimeEntry

MAX_AMOUNT_EXPONENT = 100


def parse_amount(value: Optional[str]) -> Decimal:
    """Convert a user-entered amount to Decimal, returning 0 for anything unusable."""
    if value is None:
        return Decimal("0")
    text = str(value).strip()
    if not text:
        return Decimal("0")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    # Decimal("NaN") and Decimal("inf") parse fine but must not leak into sums
    if not amount.is_finite():
        return Decimal("0")
    # Exponents like 1e999999 would overflow once summed or divided
    if amount and abs(amount.adjusted()) > MAX_AMOUNT_EXPONENT:
        return Decimal("0")
    return amount


def sum_expenses(entry: TimeEntry) -> Decimal:
    return sum((parse_amount(getattr(entry, name)) for name in EXPENSE_FIELDS), Decimal("0"))


def expense_total(entry: TimeEntry) -> str:
    """Sum of the six expense fields as a 2-decimal string."""
    return format_hours(sum_expenses(entry))
