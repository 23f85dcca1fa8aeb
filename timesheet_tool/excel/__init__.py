"""Excel output layer."""
from timesheet_tool.excel.generator import generate_excel_report

__all__ = ["generate_excel_report"]
