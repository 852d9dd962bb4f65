"""Date-range picker controller.

Wraps a :class:`CalendarEngine` with month navigation, timezone selection,
display formatting and the Apply/Cancel commit step. The host only hears
about ranges through ``on_range_selection``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, timedelta

from rangedash.calendar.engine import CalendarEngine
from rangedash.calendar.grid import (
    DAYS_OF_WEEK,
    MONTH_NAMES,
    CalendarGrid,
    check_month,
    generate_grid,
    month_label,
    next_month,
    previous_month,
)
from rangedash.calendar.policy import BlockedMap
from rangedash.calendar.state import DateRange, DayCell
from rangedash.config import DashboardConfig
from rangedash.timezones import TimezoneOption, TimezoneTable

_logger = logging.getLogger(__name__)

RangeCallback = Callable[[date, date, str], None]


def _format_slash(day: date) -> str:
    return f"{day.day:02d}/{day.month:02d}/{day.year}"


def _format_short(day: date) -> str:
    return f"{day.day:02d} {MONTH_NAMES[day.month - 1][:3]} {day.year}"


class RangePickerController:
    """Picker surface state around a calendar engine.

    Parameters
    ----------
    on_range_selection : callable, optional
        Host callback ``(start, end, timezone)``; only ever called with a
        complete range.
    config : DashboardConfig
        Span limit, past-day limit, default timezone and initial range length.
    timezones : TimezoneTable
        Selectable timezones; ``config.default_timezone`` must be one of them.
    initial_range : DateRange, optional
        Range shown on mount. Defaults to the last ``initial_range_days``
        days ending today.
    engine : CalendarEngine, optional
        Pre-built engine; by default one is built from *config*.
    """

    def __init__(
        self,
        *,
        on_range_selection: RangeCallback | None = None,
        config: DashboardConfig | None = None,
        timezones: TimezoneTable | None = None,
        blocked_map: BlockedMap | None = None,
        today: Callable[[], date] = date.today,
        initial_range: DateRange | None = None,
        engine: CalendarEngine | None = None,
        disabled: bool = False,
    ) -> None:
        self._config = config or DashboardConfig()
        self._timezones = timezones if timezones is not None else TimezoneTable()
        self._timezone = self._timezones.require(self._config.default_timezone).value
        self._on_range_selection = on_range_selection
        self._today = today
        self._engine = engine if engine is not None else CalendarEngine(
            max_selection_range_days=self._config.max_selection_range_days,
            max_past_days=self._config.max_past_days,
            blocked_map=blocked_map,
            today=today,
        )
        self._engine.add_selection_listener(self._handle_selection)
        self._disabled = disabled
        self._is_open = False

        current = today()
        self._year = current.year
        self._month = current.month - 1
        self._selected = DateRange()
        self.reset(initial_range if initial_range is not None else self._default_range(current))

    def _default_range(self, current: date) -> DateRange:
        return DateRange(start=current - timedelta(days=self._config.initial_range_days), end=current)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def engine(self) -> CalendarEngine:
        return self._engine

    @property
    def selected_range(self) -> DateRange:
        """Last complete range committed in the calendar (or supplied on reset)."""
        return self._selected

    @property
    def timezone(self) -> str:
        return self._timezone

    @property
    def timezone_option(self) -> TimezoneOption:
        return self._timezones.require(self._timezone)

    @property
    def timezone_options(self) -> list[TimezoneOption]:
        return list(self._timezones)

    @property
    def displayed_month(self) -> tuple[int, int]:
        """``(year, month)`` currently shown, month zero-based."""
        return self._year, self._month

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def disabled(self) -> bool:
        return self._disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._disabled = value
        if value:
            self.close()

    def reset(self, initial_range: DateRange | None) -> None:
        """Load a new initial range from the host, without calling back."""
        self._engine.reset(initial_range)
        self._selected = initial_range if initial_range is not None and initial_range.is_complete else DateRange()

    def _handle_selection(self, start: date, end: date) -> None:
        self._selected = DateRange(start=start, end=end)

    def _emit(self, start: date, end: date) -> None:
        if self._on_range_selection is None:
            return
        _logger.debug("Range selected %s..%s (%s)", start, end, self._timezone)
        self._on_range_selection(start, end, self._timezone)

    # ------------------------------------------------------------------
    # Surface
    # ------------------------------------------------------------------

    def open(self) -> bool:
        if self._disabled:
            return False
        self._is_open = True
        return True

    def close(self) -> None:
        self._is_open = False

    def cancel(self) -> None:
        """Close without calling back; the calendar keeps its selection."""
        self.close()

    def apply(self) -> bool:
        """Hand the calendar's complete selection to the host and close.

        Returns ``False`` (and does nothing) when the selection is incomplete.
        """
        state = self._engine.state
        if not state.is_complete:
            _logger.debug("Apply ignored: selection is %s", state.phase)
            return False
        assert state.start is not None and state.end is not None  # noqa: S101
        self._selected = DateRange(start=state.start, end=state.end)
        self._emit(state.start, state.end)
        self.close()
        return True

    def set_timezone(self, value: str) -> None:
        """Switch timezone; a complete range is re-sent immediately."""
        option = self._timezones.require(value)
        if option.value == self._timezone:
            return
        self._timezone = option.value
        start, end = self._selected.start, self._selected.end
        if start is not None and end is not None:
            self._emit(start, end)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def next_month(self) -> tuple[int, int]:
        self._year, self._month = next_month(self._year, self._month)
        return self.displayed_month

    def previous_month(self) -> tuple[int, int]:
        self._year, self._month = previous_month(self._year, self._month)
        return self.displayed_month

    def show_month(self, year: int, month: int) -> None:
        check_month(month)
        self._year, self._month = year, month

    def grid(self) -> CalendarGrid:
        return generate_grid(self._year, self._month)

    def day_cells(self) -> tuple[tuple[DayCell | None, ...], ...]:
        return self._engine.describe_grid(self.grid())

    # ------------------------------------------------------------------
    # Display text
    # ------------------------------------------------------------------

    def month_label(self) -> str:
        return month_label(self._year, self._month)

    @staticmethod
    def weekday_labels() -> tuple[str, ...]:
        return DAYS_OF_WEEK

    def display_text(self) -> str:
        """``"01/04/2025 - 08/04/2025 GMT+5:30"``, or ``""`` without a range."""
        start, end = self._selected.start, self._selected.end
        if start is None or end is None:
            return ""
        return f"{_format_slash(start)} - {_format_slash(end)} GMT{self.timezone_option.offset}"

    def summary_text(self) -> str:
        """Calendar footer text for the engine's committed selection."""
        state = self._engine.state
        if state.start is None or state.end is None:
            return ""
        return f"{_format_short(state.start)} - {_format_short(state.end)}"
