"""Table layer: column declarations, kind-based comparators and the filter/sort engine."""

from rangedash.table.columns import ColumnKind, ColumnSpec, SortDirection, SortState, cell_value
from rangedash.table.compare import comparator_for, locale_compare, matcher_for
from rangedash.table.engine import TableEngine, filter_rows, sort_rows

__all__ = [
    "ColumnKind",
    "ColumnSpec",
    "SortDirection",
    "SortState",
    "TableEngine",
    "cell_value",
    "comparator_for",
    "filter_rows",
    "locale_compare",
    "matcher_for",
    "sort_rows",
]
