"""Row model returned by the bundled fetcher, and its default columns."""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from rangedash.table.columns import ColumnKind, ColumnSpec


class RowStatus(StrEnum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    IN_PROGRESS = "In Progress"
    CANCELLED = "Cancelled"


class DataRow(BaseModel):
    """One dated record shown in the results table."""

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    id: int
    date: dt.date
    title: str = Field(default="", max_length=30)
    description: str = Field(default="", max_length=100)
    status: RowStatus = RowStatus.PENDING


DATA_ROW_COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec(id="id", label="ID", kind=ColumnKind.NUMBER),
    ColumnSpec(id="date", label="Date", kind=ColumnKind.DATE, searchable=False),
    ColumnSpec(id="title", label="Title"),
    ColumnSpec(id="description", label="Description", sortable=False),
    ColumnSpec(id="status", label="Status"),
)
