"""Calendar layer.

Grid generation, the disabled-date policy and the two-click selection
state machine. Nothing here knows about rendering.
"""

from rangedash.calendar.engine import CalendarEngine
from rangedash.calendar.grid import (
    DAYS_OF_WEEK,
    CalendarGrid,
    generate_grid,
    month_label,
    next_month,
    previous_month,
)
from rangedash.calendar.policy import BlockedDateEntry, build_blocked_map, is_disabled, span_days
from rangedash.calendar.state import (
    DateRange,
    DayCell,
    RangeEdge,
    SelectionPhase,
    SelectionState,
    SelectOutcome,
)

__all__ = [
    "DAYS_OF_WEEK",
    "BlockedDateEntry",
    "CalendarEngine",
    "CalendarGrid",
    "DateRange",
    "DayCell",
    "RangeEdge",
    "SelectOutcome",
    "SelectionPhase",
    "SelectionState",
    "build_blocked_map",
    "generate_grid",
    "is_disabled",
    "month_label",
    "next_month",
    "previous_month",
    "span_days",
]
