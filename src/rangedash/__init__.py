"""rangedash - Date-range picker, result cache and table engine for dashboards."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("rangedash")
except PackageNotFoundError:
    __version__ = "0+local"

from rangedash.cache import CacheEntry, TTLCache, cache_key
from rangedash.calendar import (
    BlockedDateEntry,
    CalendarEngine,
    DateRange,
    DayCell,
    RangeEdge,
    SelectionPhase,
    SelectionState,
    SelectOutcome,
    build_blocked_map,
    generate_grid,
    is_disabled,
)
from rangedash.config import DashboardConfig
from rangedash.exceptions import (
    ConfigError,
    FetchError,
    RangeDashError,
    SelectionError,
    SelectionSpanError,
)
from rangedash.fetch import HttpRowFetcher, RowFetcher
from rangedash.models import DATA_ROW_COLUMNS, DataRow, RowStatus
from rangedash.orchestrator import DashboardOrchestrator, DashboardSnapshot
from rangedash.picker import RangePickerController
from rangedash.table import (
    ColumnKind,
    ColumnSpec,
    SortDirection,
    SortState,
    TableEngine,
    filter_rows,
    sort_rows,
)
from rangedash.timezones import DEFAULT_TIMEZONE_OPTIONS, TimezoneOption, TimezoneTable

__all__ = [
    "__version__",
    "DATA_ROW_COLUMNS",
    "DEFAULT_TIMEZONE_OPTIONS",
    "BlockedDateEntry",
    "CacheEntry",
    "CalendarEngine",
    "ColumnKind",
    "ColumnSpec",
    "ConfigError",
    "DashboardConfig",
    "DashboardOrchestrator",
    "DashboardSnapshot",
    "DataRow",
    "DateRange",
    "DayCell",
    "FetchError",
    "HttpRowFetcher",
    "RangeDashError",
    "RangeEdge",
    "RangePickerController",
    "RowFetcher",
    "RowStatus",
    "SelectOutcome",
    "SelectionError",
    "SelectionPhase",
    "SelectionSpanError",
    "SelectionState",
    "SortDirection",
    "SortState",
    "TTLCache",
    "TableEngine",
    "TimezoneOption",
    "TimezoneTable",
    "build_blocked_map",
    "cache_key",
    "filter_rows",
    "generate_grid",
    "is_disabled",
    "sort_rows",
]
