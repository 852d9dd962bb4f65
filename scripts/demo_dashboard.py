#!/usr/bin/env python3
"""Drive the dashboard end to end against the live JSONPlaceholder API.

Clicks a range into the picker, applies it, waits for the orchestrator to
fetch (or hit the cache) and prints the visible table rows.

Examples:
    python scripts/demo_dashboard.py --days 5 --timezone Europe/London
    python scripts/demo_dashboard.py --search qui --sort title --desc --repeat
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from rangedash import (  # noqa: E402
    DATA_ROW_COLUMNS,
    DashboardConfig,
    DashboardOrchestrator,
    DataRow,
    HttpRowFetcher,
    RangeDashError,
    RangePickerController,
    TableEngine,
)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--days", type=int, default=3, help="Span of the clicked range, ending today.")
    parser.add_argument("--timezone", default=None, help="Timezone value to switch to after applying.")
    parser.add_argument("--search", default="", help="Search term for the title column.")
    parser.add_argument("--sort", default=None, help="Column id to sort by.")
    parser.add_argument("--desc", action="store_true", help="Sort descending.")
    parser.add_argument("--repeat", action="store_true", help="Request the same range again to show a cache hit.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def _print_rows(rows: list[DataRow]) -> None:
    if not rows:
        print("  (no rows)")
        return
    for row in rows:
        print(f"  {row.id:>3}  {row.date.isoformat()}  {row.status.value:<11}  {row.title}")


async def _run(args: argparse.Namespace) -> int:
    config = DashboardConfig.from_env()
    table: TableEngine[DataRow] = TableEngine(DATA_ROW_COLUMNS, search_column_id="title")
    if args.search:
        table.set_search_term(args.search)
    if args.sort:
        table.request_sort(args.sort)
        if args.desc:
            table.request_sort(args.sort)

    async with HttpRowFetcher(config) as fetcher:
        orchestrator = DashboardOrchestrator(fetcher, table, config=config)
        pending: list[asyncio.Task[bool]] = []

        def on_range_selection(start: date, end: date, timezone: str) -> None:
            pending.append(orchestrator.handle_range_selection(start, end, timezone))

        picker = RangePickerController(on_range_selection=on_range_selection, config=config)
        today = picker.engine.today()

        picker.open()
        picker.engine.select(today - timedelta(days=args.days))
        outcome = picker.engine.select(today)
        if picker.engine.last_error is not None:
            print(f"Selection rejected ({outcome}): {picker.engine.last_error}")
            return 2
        picker.apply()
        if args.timezone:
            picker.set_timezone(args.timezone)
        if args.repeat:
            on_range_selection(today - timedelta(days=args.days), today, picker.timezone)

        for task in pending:
            await task

        snapshot = orchestrator.snapshot
        print(picker.display_text())
        if snapshot.error:
            print(f"Error: {snapshot.error}")
            return 1
        print(f"{len(snapshot.rows)} rows ({'cache' if snapshot.from_cache else 'network'}), "
              f"{len(table.visible_rows())} visible")
        _print_rows(table.visible_rows())
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        return asyncio.run(_run(args))
    except RangeDashError as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
