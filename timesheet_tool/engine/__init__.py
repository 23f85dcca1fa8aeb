"""Hours, expense and validation engines."""
from timesheet_tool.engine.overtime import split_overtime
from timesheet_tool.engine.aggregator import compute_totals, refresh_totals
from timesheet_tool.engine.expenses import expense_total
from timesheet_tool.engine.validator import validate_sheet

__all__ = ["split_overtime", "compute_totals", "refresh_totals", "expense_total", "validate_sheet"]
