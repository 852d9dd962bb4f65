"""Disabled-date and span policy.

Pure functions only; the engine supplies "today" and its configuration.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_MAX_PAST_DAYS = 90


class BlockedDateEntry(BaseModel):
    """Static annotation for a single calendar day.

    ``message`` is shown as a tooltip; ``disabled`` also makes the day
    unselectable.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    iso_date: str
    message: str
    disabled: bool = False

    @field_validator("iso_date")
    @classmethod
    def _check_iso_date(cls, value: str) -> str:
        return date.fromisoformat(value.strip()).isoformat()


BlockedMap = Mapping[str, BlockedDateEntry]


def build_blocked_map(entries: Iterable[BlockedDateEntry]) -> dict[str, BlockedDateEntry]:
    """Key entries by their ISO day; a later entry for the same day wins."""
    return {entry.iso_date: entry for entry in entries}


def calendar_day(value: date | datetime) -> date:
    """Drop the time of day, if any."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_disabled(
    day: date | datetime,
    today: date,
    blocked_map: BlockedMap,
    max_past_days: int = DEFAULT_MAX_PAST_DAYS,
) -> bool:
    """Return ``True`` when *day* cannot be clicked or hovered.

    Policy:
    - a blocked-map entry flagged ``disabled`` always disables the day;
    - days strictly before ``today - max_past_days`` are disabled.
    """
    day = calendar_day(day)
    entry = blocked_map.get(day.isoformat())
    if entry is not None and entry.disabled:
        return True
    return day < today - timedelta(days=max_past_days)


def span_days(start: date, end: date) -> int:
    """Whole days from *start* to *end* (``0`` for the same day)."""
    return (calendar_day(end) - calendar_day(start)).days


def ordered(first: date, second: date) -> tuple[date, date]:
    if second < first:
        return second, first
    return first, second
