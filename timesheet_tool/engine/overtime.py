"""Regular/overtime splitting for a single shift.

Business Rules:
- Regular hours are the part of a shift that overlaps the fixed
  08:00-17:00 reference window.
- Everything else the technician worked is overtime, including any
  portion after midnight.
- A stop time at or before the start time means the shift ran into the
  next day. It is never treated as an error here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Optional

WORK_START_MINUTES = 8 * 60   # 08:00
WORK_END_MINUTES = 17 * 60    # 17:00
MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")

ZERO = Decimal("0")
SIXTY = Decimal("60")


@dataclass(frozen=True)
class OvertimeSplit:
    regular_hours: Decimal
    overtime_hours: Decimal

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours


def parse_clock(value: Optional[str]) -> Optional[int]:
    """Convert "HH:MM" to minutes since midnight.

    Returns None for empty or malformed input. Seconds ("HH:MM:SS", as
    returned by the backend's time columns) are accepted and ignored.
    """
    if not value or not value.strip():
        return None
    match = _CLOCK_RE.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def is_overnight(start_time: Optional[str], stop_time: Optional[str]) -> bool:
    start = parse_clock(start_time)
    stop = parse_clock(stop_time)
    if start is None or stop is None:
        return False
    return stop <= start


def split_overtime(start_time: Optional[str], stop_time: Optional[str]) -> OvertimeSplit:
    """Split a shift into regular and overtime hours.

    Missing or unreadable times yield a zero split.
    """
    start = parse_clock(start_time)
    stop = parse_clock(stop_time)
    if start is None or stop is None:
        return OvertimeSplit(ZERO, ZERO)

    if stop <= start:
        stop += MINUTES_PER_DAY

    overlap_start = max(start, WORK_START_MINUTES)
    overlap_end = min(stop, WORK_END_MINUTES)
    regular = max(0, overlap_end - overlap_start)

    worked = stop - start
    overtime = worked - regular

    return OvertimeSplit(
        regular_hours=Decimal(regular) / SIXTY,
        overtime_hours=Decimal(overtime) / SIXTY,
    )


def worked_hours(start_time: Optional[str], stop_time: Optional[str]) -> Decimal:
    return split_overtime(start_time, stop_time).total_hours


def format_hours(value: Decimal) -> str:
    """Format hours (or money) with two decimals, rounding half up."""
    with localcontext() as ctx:
        # Every integer digit plus two decimals must fit in the precision
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return str(value.quantize(Decimal("0.01"), ROUND_HALF_UP))
