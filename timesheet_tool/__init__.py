"""Daily time sheet toolkit for field service reports."""
