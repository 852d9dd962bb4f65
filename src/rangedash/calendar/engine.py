"""Two-click range selection state machine.

This is the only component allowed to change a :class:`SelectionState`.
Hover previews live beside the state, never inside it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

from rangedash.calendar.grid import CalendarGrid
from rangedash.calendar.policy import (
    DEFAULT_MAX_PAST_DAYS,
    BlockedMap,
    calendar_day,
    is_disabled,
    ordered,
    span_days,
)
from rangedash.calendar.state import (
    DateRange,
    DayCell,
    RangeEdge,
    SelectionPhase,
    SelectionState,
    SelectOutcome,
)
from rangedash.exceptions import SelectionSpanError

_logger = logging.getLogger(__name__)

StateListener = Callable[[SelectionState], None]
SelectionListener = Callable[[date, date], None]
ValidationListener = Callable[[SelectionSpanError], None]


def _unsubscribe(listeners: list, callback: Callable) -> Callable[[], None]:  # type: ignore[type-arg]
    def remove() -> None:
        if callback in listeners:
            listeners.remove(callback)

    return remove


class CalendarEngine:
    """Selection state machine with hover preview and disabled-date policy.

    Parameters
    ----------
    max_selection_range_days : int
        Longest allowed span between the two ends, in whole days.
    max_past_days : int
        Days older than this (relative to *today*) are disabled.
    blocked_map : mapping
        ISO day string to :class:`BlockedDateEntry`.
    today : callable
        Returns the current calendar day. Tests inject a fixed day.
    on_selection : callable, optional
        Called with ``(start, end)`` once per successful commit.
    """

    def __init__(
        self,
        *,
        max_selection_range_days: int = 10,
        max_past_days: int = DEFAULT_MAX_PAST_DAYS,
        blocked_map: BlockedMap | None = None,
        today: Callable[[], date] = date.today,
        on_selection: SelectionListener | None = None,
    ) -> None:
        self._max_span = max_selection_range_days
        self._max_past_days = max_past_days
        self._blocked: BlockedMap = dict(blocked_map or {})
        self._today = today
        self._state = SelectionState.empty()
        self._hover: date | None = None
        self._last_error: SelectionSpanError | None = None
        self._state_listeners: list[StateListener] = []
        self._selection_listeners: list[SelectionListener] = []
        self._validation_listeners: list[ValidationListener] = []
        if on_selection is not None:
            self._selection_listeners.append(on_selection)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, callback: StateListener) -> Callable[[], None]:
        """Register a state-change listener; returns an unsubscribe callable."""
        self._state_listeners.append(callback)
        return _unsubscribe(self._state_listeners, callback)

    def add_selection_listener(self, callback: SelectionListener) -> Callable[[], None]:
        self._selection_listeners.append(callback)
        return _unsubscribe(self._selection_listeners, callback)

    def add_validation_listener(self, callback: ValidationListener) -> Callable[[], None]:
        self._validation_listeners.append(callback)
        return _unsubscribe(self._validation_listeners, callback)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def selected_range(self) -> DateRange:
        return self._state.date_range

    @property
    def hover_date(self) -> date | None:
        return self._hover

    @property
    def last_error(self) -> SelectionSpanError | None:
        """The most recent rejected commit, cleared by the next transition."""
        return self._last_error

    @property
    def max_selection_range_days(self) -> int:
        return self._max_span

    @property
    def blocked_map(self) -> BlockedMap:
        return self._blocked

    @property
    def preview_range(self) -> DateRange | None:
        """Highlight range between the anchor and the hovered day."""
        if self._state.phase != SelectionPhase.ANCHORED or self._hover is None:
            return None
        assert self._state.start is not None  # noqa: S101
        lo, hi = ordered(self._state.start, self._hover)
        return DateRange(start=lo, end=hi)

    def today(self) -> date:
        return self._today()

    def is_disabled(self, day: date | datetime) -> bool:
        return is_disabled(day, self._today(), self._blocked, self._max_past_days)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def select(self, day: date | datetime) -> SelectOutcome:
        """Feed one click into the state machine."""
        day = calendar_day(day)
        if self.is_disabled(day):
            _logger.debug("Ignoring click on disabled day %s", day)
            return SelectOutcome.IGNORED

        current = self._state
        if current.phase != SelectionPhase.ANCHORED:
            self._transition(SelectionState.anchored(day))
            return SelectOutcome.ANCHORED

        assert current.start is not None  # noqa: S101
        lo, hi = ordered(current.start, day)
        span = span_days(lo, hi)
        if span > self._max_span:
            error = SelectionSpanError(
                f"Selection cannot exceed {self._max_span} days",
                span_days=span,
                max_days=self._max_span,
            )
            self._last_error = error
            _logger.debug("Rejected %s..%s: %d days > %d", lo, hi, span, self._max_span)
            for validation_cb in list(self._validation_listeners):
                validation_cb(error)
            return SelectOutcome.REJECTED

        self._transition(SelectionState.committed(lo, hi))
        for selection_cb in list(self._selection_listeners):
            selection_cb(lo, hi)
        return SelectOutcome.COMMITTED

    def hover(self, day: date | datetime) -> DateRange | None:
        """Record a hovered day; only has an effect while anchored."""
        day = calendar_day(day)
        if self._state.phase != SelectionPhase.ANCHORED or self.is_disabled(day):
            return self.preview_range
        self._hover = day
        return self.preview_range

    def clear_hover(self) -> None:
        self._hover = None

    def reset(self, initial: DateRange | None = None) -> None:
        """Replace the selection without notifying selection listeners.

        A complete range becomes committed, a start-only range anchored,
        anything else empty.
        """
        if initial is None or initial.start is None:
            state = SelectionState.empty()
        elif initial.end is None:
            state = SelectionState.anchored(initial.start)
        else:
            state = SelectionState.committed(initial.start, initial.end)
        self._transition(state)

    def _transition(self, state: SelectionState) -> None:
        self._hover = None
        self._last_error = None
        self._state = state
        _logger.debug("Selection -> %s (%s..%s)", state.phase, state.start, state.end)
        for listener in list(self._state_listeners):
            listener(state)

    # ------------------------------------------------------------------
    # Highlighting
    # ------------------------------------------------------------------

    def _highlight_bounds(self) -> tuple[date, date] | None:
        state = self._state
        if state.phase == SelectionPhase.COMMITTED:
            assert state.start is not None and state.end is not None  # noqa: S101
            return state.start, state.end
        preview = self.preview_range
        if preview is not None:
            assert preview.start is not None and preview.end is not None  # noqa: S101
            return preview.start, preview.end
        if state.start is not None:
            return state.start, state.start
        return None

    def is_in_range(self, day: date | datetime) -> bool:
        bounds = self._highlight_bounds()
        if bounds is None:
            return False
        day = calendar_day(day)
        return bounds[0] <= day <= bounds[1]

    def range_edges(self, day: date | datetime) -> RangeEdge:
        """Which ends of the committed or previewed range fall on *day*.

        A zero-span range yields both ``START`` and ``END``.
        """
        bounds = self._highlight_bounds()
        if bounds is None:
            return RangeEdge.NONE
        day = calendar_day(day)
        edges = RangeEdge.NONE
        if day == bounds[0]:
            edges |= RangeEdge.START
        if day == bounds[1]:
            edges |= RangeEdge.END
        return edges

    def describe_day(self, day: date | datetime) -> DayCell:
        day = calendar_day(day)
        entry = self._blocked.get(day.isoformat())
        return DayCell(
            day=day,
            disabled=self.is_disabled(day),
            in_range=self.is_in_range(day),
            edges=self.range_edges(day),
            is_today=day == self._today(),
            message=entry.message if entry is not None else None,
        )

    def describe_grid(self, grid: CalendarGrid) -> tuple[tuple[DayCell | None, ...], ...]:
        return tuple(tuple(None if day is None else self.describe_day(day) for day in row) for row in grid)
