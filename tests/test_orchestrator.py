from __future__ import annotations

import asyncio
from datetime import date, datetime
from typing import Any

import pytest

from rangedash.cache import TTLCache, cache_key
from rangedash.calendar.state import DateRange
from rangedash.exceptions import ConfigError, FetchError
from rangedash.models import DATA_ROW_COLUMNS, DataRow
from rangedash.orchestrator import FETCH_FAILED_MESSAGE, DashboardOrchestrator, DashboardSnapshot
from rangedash.table.engine import TableEngine

TZ = "Asia/Calcutta"


def _april(day: int) -> date:
    return date(2025, 4, day)


def _rows(*ids: int) -> list[DataRow]:
    return [DataRow(id=row_id, date=_april(13), title=f"row {row_id}") for row_id in ids]


class _FakeFetcher:
    """Returns canned rows, or parks each call on a future the test resolves."""

    def __init__(self, rows: list[DataRow] | None = None, error: Exception | None = None) -> None:
        self.rows = rows
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.pending: list[asyncio.Future[list[DataRow]]] = []

    async def fetch_rows(self, start: str, end: str) -> list[DataRow]:
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        if self.rows is not None:
            return list(self.rows)
        future: asyncio.Future[list[DataRow]] = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


def _orchestrator(fetcher: _FakeFetcher) -> DashboardOrchestrator:
    table: TableEngine[DataRow] = TableEngine(DATA_ROW_COLUMNS)
    return DashboardOrchestrator(fetcher, table, cache=TTLCache(clock=lambda: 0.0))


async def _settle() -> None:
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_miss_fetches_with_offset_and_end_of_day() -> None:
    fetcher = _FakeFetcher(rows=_rows(1, 2))
    orchestrator = _orchestrator(fetcher)

    assert await orchestrator.load_range(_april(13), _april(20), TZ) is True

    assert fetcher.calls == [("2025-04-13 00:00:00 +0530", "2025-04-20 23:59:59 +0530")]
    assert [row.id for row in orchestrator.table.rows] == [1, 2]
    snapshot = orchestrator.snapshot
    assert snapshot.loading is False
    assert snapshot.error is None
    assert snapshot.from_cache is False
    assert snapshot.date_range == DateRange(start=_april(13), end=_april(20))
    assert snapshot.timezone == TZ


@pytest.mark.asyncio
async def test_negative_offset_in_request() -> None:
    fetcher = _FakeFetcher(rows=[])
    orchestrator = _orchestrator(fetcher)

    await orchestrator.load_range(_april(1), _april(2), "America/Los_Angeles")

    assert fetcher.calls == [("2025-04-01 00:00:00 -0800", "2025-04-02 23:59:59 -0800")]


@pytest.mark.asyncio
async def test_second_request_is_served_from_cache() -> None:
    fetcher = _FakeFetcher(rows=_rows(1))
    orchestrator = _orchestrator(fetcher)

    await orchestrator.load_range(_april(13), _april(20), TZ)
    assert await orchestrator.load_range(_april(13), _april(20), TZ) is True

    assert len(fetcher.calls) == 1
    assert orchestrator.snapshot.from_cache is True
    assert [row.id for row in orchestrator.snapshot.rows] == [1]


@pytest.mark.asyncio
async def test_empty_result_is_cached() -> None:
    fetcher = _FakeFetcher(rows=[])
    orchestrator = _orchestrator(fetcher)

    await orchestrator.load_range(_april(13), _april(20), TZ)
    await orchestrator.load_range(_april(13), _april(20), TZ)

    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_times_of_day_share_a_cache_entry() -> None:
    fetcher = _FakeFetcher(rows=_rows(1))
    orchestrator = _orchestrator(fetcher)

    await orchestrator.load_range(datetime(2025, 4, 13, 9, 30), datetime(2025, 4, 20, 8, 0), TZ)
    await orchestrator.load_range(datetime(2025, 4, 13, 22, 0), datetime(2025, 4, 20, 23, 0), TZ)

    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_timezone_is_part_of_the_cache_key() -> None:
    fetcher = _FakeFetcher(rows=_rows(1))
    orchestrator = _orchestrator(fetcher)

    await orchestrator.load_range(_april(13), _april(20), TZ)
    await orchestrator.load_range(_april(13), _april(20), "Europe/London")

    assert len(fetcher.calls) == 2


@pytest.mark.asyncio
async def test_loading_is_published_before_rows() -> None:
    fetcher = _FakeFetcher(rows=_rows(1))
    orchestrator = _orchestrator(fetcher)
    seen: list[DashboardSnapshot] = []
    orchestrator.add_listener(seen.append)

    await orchestrator.load_range(_april(13), _april(20), TZ)

    assert [snapshot.loading for snapshot in seen] == [True, False]
    assert seen[0].rows == []
    assert [row.id for row in seen[1].rows] == [1]


@pytest.mark.asyncio
async def test_stale_result_is_discarded() -> None:
    fetcher = _FakeFetcher()
    orchestrator = _orchestrator(fetcher)

    first = orchestrator.handle_range_selection(_april(1), _april(5), TZ)
    await _settle()
    second = orchestrator.handle_range_selection(_april(10), _april(15), TZ)
    await _settle()
    assert len(fetcher.pending) == 2

    fetcher.pending[1].set_result(_rows(2))
    assert await second is True
    fetcher.pending[0].set_result(_rows(1))
    assert await first is False

    assert [row.id for row in orchestrator.table.rows] == [2]
    assert orchestrator.snapshot.date_range == DateRange(start=_april(10), end=_april(15))
    assert cache_key(_april(1), _april(5), TZ) not in orchestrator.cache


@pytest.mark.asyncio
async def test_cache_hit_supersedes_pending_fetch() -> None:
    fetcher = _FakeFetcher(rows=_rows(7))
    orchestrator = _orchestrator(fetcher)
    await orchestrator.load_range(_april(10), _april(15), TZ)

    fetcher.rows = None
    pending = orchestrator.handle_range_selection(_april(1), _april(5), TZ)
    await _settle()
    assert await orchestrator.load_range(_april(10), _april(15), TZ) is True

    fetcher.pending[0].set_result(_rows(1))
    assert await pending is False
    assert [row.id for row in orchestrator.table.rows] == [7]


@pytest.mark.asyncio
async def test_failure_sets_error_and_is_not_cached() -> None:
    fetcher = _FakeFetcher(error=FetchError("boom", status_code=500, endpoint="/posts"))
    orchestrator = _orchestrator(fetcher)

    assert await orchestrator.load_range(_april(13), _april(20), TZ) is False

    snapshot = orchestrator.snapshot
    assert snapshot.error == FETCH_FAILED_MESSAGE
    assert snapshot.loading is False
    assert len(orchestrator.cache) == 0

    fetcher.error = None
    fetcher.rows = _rows(3)
    assert await orchestrator.load_range(_april(13), _april(20), TZ) is True
    assert orchestrator.snapshot.error is None
    assert len(fetcher.calls) == 2


@pytest.mark.asyncio
async def test_unexpected_exception_is_reported_as_fetch_failure() -> None:
    fetcher = _FakeFetcher(error=RuntimeError("unexpected"))
    orchestrator = _orchestrator(fetcher)

    assert await orchestrator.load_range(_april(13), _april(20), TZ) is False
    assert orchestrator.snapshot.error == FETCH_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_stale_failure_is_discarded() -> None:
    fetcher = _FakeFetcher()
    orchestrator = _orchestrator(fetcher)

    first = orchestrator.handle_range_selection(_april(1), _april(5), TZ)
    await _settle()
    second = orchestrator.handle_range_selection(_april(10), _april(15), TZ)
    await _settle()

    fetcher.pending[1].set_result(_rows(2))
    await second
    fetcher.pending[0].set_exception(FetchError("late failure"))
    assert await first is False

    assert orchestrator.snapshot.error is None
    assert [row.id for row in orchestrator.table.rows] == [2]


@pytest.mark.asyncio
async def test_refresh_refetches_current_range() -> None:
    fetcher = _FakeFetcher(rows=_rows(1))
    orchestrator = _orchestrator(fetcher)

    assert await orchestrator.refresh() is False

    await orchestrator.load_range(_april(13), _april(20), TZ)
    fetcher.rows = _rows(1, 2)
    assert await orchestrator.refresh() is True

    assert len(fetcher.calls) == 2
    assert [row.id for row in orchestrator.table.rows] == [1, 2]


@pytest.mark.asyncio
async def test_unknown_timezone_rejected_before_fetch() -> None:
    fetcher = _FakeFetcher(rows=[])
    orchestrator = _orchestrator(fetcher)

    with pytest.raises(ConfigError):
        await orchestrator.load_range(_april(13), _april(20), "Mars/Olympus")
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_table_filters_apply_to_fetched_rows() -> None:
    rows: list[Any] = [
        DataRow(id=1, date=_april(14), title="alpha"),
        DataRow(id=2, date=_april(13), title="beta"),
    ]
    fetcher = _FakeFetcher(rows=rows)
    orchestrator = _orchestrator(fetcher)
    orchestrator.table.set_search_column("title")
    orchestrator.table.set_search_term("bet")

    await orchestrator.load_range(_april(13), _april(20), TZ)

    assert [row.id for row in orchestrator.table.visible_rows()] == [2]


@pytest.mark.asyncio
async def test_injected_cache_default_ttl_is_used() -> None:
    fetcher = _FakeFetcher(rows=_rows(1))
    cache: TTLCache[list[Any]] = TTLCache(default_ttl=60.0, clock=lambda: 0.0)
    table: TableEngine[DataRow] = TableEngine(DATA_ROW_COLUMNS)
    orchestrator = DashboardOrchestrator(fetcher, table, cache=cache)

    await orchestrator.load_range(_april(13), _april(20), TZ)

    entry = cache.entry(cache_key(_april(13), _april(20), TZ))
    assert entry is not None
    assert entry.expires_at == 60.0


@pytest.mark.asyncio
async def test_cancelled_fetch_clears_loading() -> None:
    fetcher = _FakeFetcher()
    orchestrator = _orchestrator(fetcher)

    task = orchestrator.handle_range_selection(_april(1), _april(5), TZ)
    await _settle()
    assert orchestrator.snapshot.loading is True

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert orchestrator.snapshot.loading is False
    assert orchestrator.snapshot.error is None
    assert len(orchestrator.cache) == 0


@pytest.mark.asyncio
async def test_cancelled_stale_fetch_leaves_newer_request_loading() -> None:
    fetcher = _FakeFetcher()
    orchestrator = _orchestrator(fetcher)

    first = orchestrator.handle_range_selection(_april(1), _april(5), TZ)
    await _settle()
    second = orchestrator.handle_range_selection(_april(10), _april(15), TZ)
    await _settle()

    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first
    assert orchestrator.snapshot.loading is True

    fetcher.pending[1].set_result(_rows(2))
    assert await second is True
    assert orchestrator.snapshot.loading is False


@pytest.mark.asyncio
async def test_unknown_timezone_rejected_before_scheduling() -> None:
    fetcher = _FakeFetcher(rows=[])
    orchestrator = _orchestrator(fetcher)

    with pytest.raises(ConfigError):
        orchestrator.handle_range_selection(_april(13), _april(20), "Mars/Olympus")

    await _settle()
    assert fetcher.calls == []
    assert orchestrator.latest_token == 0
