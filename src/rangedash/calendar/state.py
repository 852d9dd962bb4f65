"""Selection state and per-day cell models."""

from __future__ import annotations

import enum
from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, model_validator

_OPTIONAL_DATE = TypeAdapter(date | None)


class DateRange(BaseModel):
    """A possibly incomplete range of calendar days.

    When both ends are present they are stored in order; a reversed pair
    is swapped, never rejected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: date | None = None
    end: date | None = None

    @model_validator(mode="before")
    @classmethod
    def _swap_reversed(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        start = _OPTIONAL_DATE.validate_python(values.get("start"))
        end = _OPTIONAL_DATE.validate_python(values.get("end"))
        if start is not None and end is not None and end < start:
            return {**values, "start": end, "end": start}
        return values

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None


class SelectionPhase(StrEnum):
    EMPTY = "empty"
    ANCHORED = "anchored"
    COMMITTED = "committed"


class SelectionState(BaseModel):
    """Where the two-click selection currently stands.

    - ``EMPTY``: nothing selected.
    - ``ANCHORED``: first click recorded in ``start``; waiting for the second.
    - ``COMMITTED``: ``start <= end`` both set.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    phase: SelectionPhase = SelectionPhase.EMPTY
    start: date | None = None
    end: date | None = None

    @model_validator(mode="after")
    def _check_phase(self) -> SelectionState:
        if self.phase == SelectionPhase.EMPTY:
            if self.start is not None or self.end is not None:
                raise ValueError("empty selection cannot carry dates")
        elif self.phase == SelectionPhase.ANCHORED:
            if self.start is None or self.end is not None:
                raise ValueError("anchored selection needs a start and no end")
        else:
            if self.start is None or self.end is None:
                raise ValueError("committed selection needs both dates")
            if self.end < self.start:
                raise ValueError("committed selection must have start <= end")
        return self

    @classmethod
    def empty(cls) -> SelectionState:
        return cls()

    @classmethod
    def anchored(cls, start: date) -> SelectionState:
        return cls(phase=SelectionPhase.ANCHORED, start=start)

    @classmethod
    def committed(cls, start: date, end: date) -> SelectionState:
        return cls(phase=SelectionPhase.COMMITTED, start=start, end=end)

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start, end=self.end)

    @property
    def is_complete(self) -> bool:
        return self.phase == SelectionPhase.COMMITTED


class SelectOutcome(StrEnum):
    """Result of a single ``select`` call."""

    IGNORED = "ignored"
    ANCHORED = "anchored"
    COMMITTED = "committed"
    REJECTED = "rejected"


class RangeEdge(enum.Flag):
    NONE = 0
    START = enum.auto()
    END = enum.auto()


class DayCell(BaseModel):
    """Everything a renderer needs to draw one day of the grid."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    day: date
    disabled: bool = False
    in_range: bool = False
    edges: RangeEdge = RangeEdge.NONE
    is_today: bool = False
    message: str | None = None

    @property
    def is_range_start(self) -> bool:
        return RangeEdge.START in self.edges

    @property
    def is_range_end(self) -> bool:
        return RangeEdge.END in self.edges
