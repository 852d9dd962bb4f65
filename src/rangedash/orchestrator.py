"""Glue between the picker, the result cache, the fetcher and the table.

Every range request takes a new token. A fetch that resolves after a newer
request was made is dropped, whether it succeeded or failed, so the table
always reflects the most recently requested range.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date, datetime, time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rangedash.cache import TTLCache, cache_key
from rangedash.calendar.policy import calendar_day
from rangedash.calendar.state import DateRange
from rangedash.config import DashboardConfig
from rangedash.exceptions import FetchError
from rangedash.fetch import RowFetcher, format_request_datetime
from rangedash.table.engine import TableEngine
from rangedash.timezones import TimezoneTable

_logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch data. Please try again."

_END_OF_DAY = time(23, 59, 59)


class DashboardSnapshot(BaseModel):
    """What the host renders after each orchestrator change."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rows: list[Any] = Field(default_factory=list)
    loading: bool = False
    error: str | None = None
    date_range: DateRange | None = None
    timezone: str | None = None
    from_cache: bool = False


SnapshotListener = Callable[[DashboardSnapshot], None]


class DashboardOrchestrator:
    """Resolve committed ranges into table rows.

    Parameters
    ----------
    fetcher : RowFetcher
        Source of rows for cache misses.
    table : TableEngine
        Receives every applied row set.
    cache : TTLCache, optional
        Result cache; one is built from ``config.cache_ttl`` by default.
    config : DashboardConfig, optional
    timezones : TimezoneTable, optional
        Supplies the numeric offset appended to request dates.
    """

    def __init__(
        self,
        fetcher: RowFetcher,
        table: TableEngine[Any],
        *,
        cache: TTLCache[list[Any]] | None = None,
        config: DashboardConfig | None = None,
        timezones: TimezoneTable | None = None,
    ) -> None:
        self._config = config or DashboardConfig()
        self._fetcher = fetcher
        self._table = table
        self._cache: TTLCache[list[Any]] = cache if cache is not None else TTLCache(default_ttl=self._config.cache_ttl)
        self._timezones = timezones if timezones is not None else TimezoneTable()
        self._token = 0
        self._snapshot = DashboardSnapshot()
        self._listeners: list[SnapshotListener] = []
        self._tasks: set[asyncio.Task[bool]] = set()

    @property
    def cache(self) -> TTLCache[list[Any]]:
        return self._cache

    @property
    def table(self) -> TableEngine[Any]:
        return self._table

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self._snapshot

    @property
    def latest_token(self) -> int:
        return self._token

    def add_listener(self, callback: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def _publish(self, **changes: Any) -> None:
        self._snapshot = self._snapshot.model_copy(update=changes)
        for listener in list(self._listeners):
            listener(self._snapshot)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def handle_range_selection(self, start: date, end: date, timezone: str) -> asyncio.Task[bool]:
        """Synchronous host callback; schedules :meth:`load_range` on the running loop.

        Unknown timezones raise :class:`ConfigError` here, before anything
        is scheduled.
        """
        self._timezones.require(timezone)
        task = asyncio.get_running_loop().create_task(self.load_range(start, end, timezone))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def load_range(self, start: date | datetime, end: date | datetime, timezone: str) -> bool:
        """Serve ``[start, end]`` from the cache or the fetcher.

        Returns ``True`` when the result was applied to the table, ``False``
        when the fetch failed or was superseded by a newer request.
        """
        offset = self._timezones.numeric_offset(timezone)
        self._token += 1
        token = self._token

        start_day, end_day = calendar_day(start), calendar_day(end)
        key = cache_key(start_day, end_day, timezone)
        requested = DateRange(start=start_day, end=end_day)

        cached = self._cache.get(key)
        if cached is not None:
            _logger.debug("Cache hit for %s", key)
            self._table.set_rows(cached)
            self._publish(
                rows=list(cached),
                loading=False,
                error=None,
                date_range=requested,
                timezone=timezone,
                from_cache=True,
            )
            return True

        _logger.debug("Cache miss for %s; fetching (token %d)", key, token)
        self._publish(loading=True, error=None, date_range=requested, timezone=timezone, from_cache=False)

        try:
            rows = list(
                await self._fetcher.fetch_rows(
                    format_request_datetime(start_day, offset),
                    format_request_datetime(datetime.combine(end_day, _END_OF_DAY), offset),
                )
            )
        except asyncio.CancelledError:
            if token == self._token:
                _logger.debug("Fetch for %s cancelled (token %d)", key, token)
                self._publish(loading=False)
            raise
        except FetchError as exc:
            return self._fail(token, key, exc)
        except Exception as exc:  # noqa: BLE001
            _logger.debug("Unexpected fetch failure", exc_info=True)
            return self._fail(token, key, exc)

        if token != self._token:
            _logger.debug("Discarding stale result for %s (token %d < %d)", key, token, self._token)
            return False

        self._cache.put(key, rows)
        self._table.set_rows(rows)
        self._publish(rows=rows, loading=False, error=None)
        return True

    def _fail(self, token: int, key: str, exc: Exception) -> bool:
        if token != self._token:
            _logger.debug("Discarding stale failure for %s: %s", key, exc)
            return False
        _logger.warning("Fetching %s failed: %s", key, exc)
        self._publish(loading=False, error=FETCH_FAILED_MESSAGE)
        return False

    async def refresh(self) -> bool:
        """Drop the cached result for the current range and fetch it again."""
        snapshot = self._snapshot
        current = snapshot.date_range
        if current is None or current.start is None or current.end is None or snapshot.timezone is None:
            return False
        self._cache.remove(cache_key(current.start, current.end, snapshot.timezone))
        return await self.load_range(current.start, current.end, snapshot.timezone)
