"""Filter and sort engine for typed row collections.

The pipeline always filters before it sorts. Both steps are exposed as pure
functions so the ordering can be checked on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Sequence
from functools import cmp_to_key
from typing import Any, Generic, TypeVar

from rangedash.table.columns import ColumnSpec, SortDirection, SortState, cell_value
from rangedash.table.compare import comparator_for, matcher_for

_logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")

RowsListener = Callable[[list[Any]], None]


def filter_rows(rows: Iterable[RowT], column: ColumnSpec | None, term: str) -> list[RowT]:
    """Keep rows whose *column* value matches *term*.

    An empty term (or no column) keeps every row unchanged.
    """
    if not term or column is None:
        return list(rows)
    match = matcher_for(column.kind)
    return [row for row in rows if match(cell_value(row, column.id), term)]


def sort_rows(rows: Iterable[RowT], column: ColumnSpec | None, direction: SortDirection) -> list[RowT]:
    """Stable sort of *rows* by *column*; no column keeps the input order."""
    if column is None:
        return list(rows)
    compare = comparator_for(column.kind, direction)

    def by_cell(left: RowT, right: RowT) -> float:
        return compare(cell_value(left, column.id), cell_value(right, column.id))

    return sorted(rows, key=cmp_to_key(by_cell))


class TableEngine(Generic[RowT]):
    """Search, single-column sort and favorites over a row collection.

    Parameters
    ----------
    columns : sequence of ColumnSpec
        Declared columns. Column ids must be unique.
    rows : iterable, optional
        Initial rows; each must expose a unique ``id``.
    search_column_id : str, optional
        Column searched by :meth:`set_search_term`. Defaults to the first
        searchable column.
    sort_state : SortState, optional
        Initial sort.
    """

    def __init__(
        self,
        columns: Sequence[ColumnSpec],
        rows: Iterable[RowT] = (),
        *,
        search_column_id: str | None = None,
        sort_state: SortState | None = None,
    ) -> None:
        self._columns: dict[str, ColumnSpec] = {}
        for column in columns:
            if column.id in self._columns:
                raise ValueError(f"duplicate column id {column.id!r}")
            self._columns[column.id] = column

        self._rows: list[RowT] = list(rows)
        self._search_term = ""
        self._search_column_id: str | None = None
        if search_column_id is not None:
            self._search_column_id = self.column(search_column_id).id
        else:
            self._search_column_id = next((c.id for c in columns if c.searchable), None)
        self._sort_state: SortState | None = None
        if sort_state is not None:
            self.column(sort_state.column_id)
            self._sort_state = sort_state
        self._favorites: set[Hashable] = set()
        self._listeners: list[RowsListener] = []

    # ------------------------------------------------------------------
    # Columns and listeners
    # ------------------------------------------------------------------

    @property
    def columns(self) -> list[ColumnSpec]:
        return list(self._columns.values())

    def column(self, column_id: str) -> ColumnSpec:
        """Return the declared column; unknown ids raise :class:`KeyError`."""
        try:
            return self._columns[column_id]
        except KeyError:
            raise KeyError(f"unknown column {column_id!r}") from None

    @property
    def searchable_columns(self) -> list[ColumnSpec]:
        return [column for column in self._columns.values() if column.searchable]

    def add_listener(self, callback: RowsListener) -> Callable[[], None]:
        """Call *callback* with the visible rows after every change."""
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def _notify(self) -> None:
        if not self._listeners:
            return
        visible = self.visible_rows()
        for listener in list(self._listeners):
            listener(visible)

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def rows(self) -> list[RowT]:
        return list(self._rows)

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def search_column_id(self) -> str | None:
        return self._search_column_id

    @property
    def sort_state(self) -> SortState | None:
        return self._sort_state

    def set_rows(self, rows: Iterable[RowT]) -> None:
        self._rows = list(rows)
        _logger.debug("Table rows replaced (%d rows)", len(self._rows))
        self._notify()

    def set_search_term(self, term: str) -> None:
        self._search_term = term
        self._notify()

    def set_search_column(self, column_id: str) -> None:
        self._search_column_id = self.column(column_id).id
        self._notify()

    def set_sort(self, sort_state: SortState | None) -> None:
        if sort_state is not None:
            self.column(sort_state.column_id)
        self._sort_state = sort_state
        self._notify()

    def clear_sort(self) -> None:
        self.set_sort(None)

    def request_sort(self, column_id: str) -> SortState | None:
        """Header-click sort: flip direction on the active column, else start ascending.

        Non-sortable columns leave the sort unchanged.
        """
        column = self.column(column_id)
        if not column.sortable:
            return self._sort_state
        current = self._sort_state
        if current is not None and current.column_id == column_id and current.direction is SortDirection.ASC:
            direction = SortDirection.DESC
        else:
            direction = SortDirection.ASC
        self.set_sort(SortState(column_id=column_id, direction=direction))
        return self._sort_state

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def toggle_favorite(self, row_id: Hashable) -> bool:
        """Flip the favorite flag for *row_id* and return the new value."""
        if row_id in self._favorites:
            self._favorites.discard(row_id)
            return False
        self._favorites.add(row_id)
        return True

    def is_favorite(self, row_id: Hashable) -> bool:
        return row_id in self._favorites

    @property
    def favorites(self) -> frozenset[Hashable]:
        return frozenset(self._favorites)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def visible_rows(self) -> list[RowT]:
        search_column = self._columns.get(self._search_column_id) if self._search_column_id else None
        filtered = filter_rows(self._rows, search_column, self._search_term)
        sort = self._sort_state
        if sort is None:
            return filtered
        return sort_rows(filtered, self._columns[sort.column_id], sort.direction)
