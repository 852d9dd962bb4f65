"""Month grid generation and month arithmetic.

Months are zero-based throughout the calendar package (0 = January,
11 = December).
"""

from __future__ import annotations

import calendar
from datetime import date

GRID_ROWS = 6
GRID_COLUMNS = 7

DAYS_OF_WEEK: tuple[str, ...] = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")
MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

CalendarRow = tuple[date | None, ...]
CalendarGrid = tuple[CalendarRow, ...]


def check_month(month: int) -> None:
    if not 0 <= month <= 11:
        raise ValueError(f"month must be between 0 and 11, got {month}")


def generate_grid(year: int, month: int) -> CalendarGrid:
    """Build the 6x7 Sunday-first grid for *month* of *year*.

    Cells outside the month are ``None``. The grid always has six rows so
    every month renders at the same height.
    """
    check_month(month)
    first = date(year, month + 1, 1)
    # date.weekday() is Monday=0; shift to Sunday=0.
    leading = (first.weekday() + 1) % GRID_COLUMNS
    days_in_month = calendar.monthrange(year, month + 1)[1]

    cells: list[date | None] = [None] * leading
    cells.extend(date(year, month + 1, day) for day in range(1, days_in_month + 1))
    cells.extend([None] * (GRID_ROWS * GRID_COLUMNS - len(cells)))

    return tuple(
        tuple(cells[row * GRID_COLUMNS : (row + 1) * GRID_COLUMNS]) for row in range(GRID_ROWS)
    )


def next_month(year: int, month: int) -> tuple[int, int]:
    check_month(month)
    if month == 11:
        return year + 1, 0
    return year, month + 1


def previous_month(year: int, month: int) -> tuple[int, int]:
    check_month(month)
    if month == 0:
        return year - 1, 11
    return year, month - 1


def month_label(year: int, month: int) -> str:
    """``"April 2025"`` for ``(2025, 3)``."""
    check_month(month)
    return f"{MONTH_NAMES[month]} {year}"
