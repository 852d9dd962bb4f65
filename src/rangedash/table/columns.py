"""Column and sort declarations."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ColumnKind(StrEnum):
    """Declared value kind of a column.

    The kind, never the runtime type of a cell, selects both the search
    matcher and the sort comparator.
    """

    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> SortDirection:
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class ColumnSpec(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    id: str = Field(..., description="Row key or attribute name")
    label: str
    kind: ColumnKind = ColumnKind.STRING
    sortable: bool = True
    searchable: bool = True

    @field_validator("id")
    @classmethod
    def _non_empty_id(cls, value: str) -> str:
        if not value:
            raise ValueError("column id must be non-empty")
        return value


class SortState(BaseModel):
    """Active single-column sort."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    column_id: str
    direction: SortDirection = SortDirection.ASC


def cell_value(row: Any, column_id: str) -> Any:
    """Read *column_id* from a mapping row or an attribute row."""
    if isinstance(row, Mapping):
        return row.get(column_id)
    return getattr(row, column_id, None)
