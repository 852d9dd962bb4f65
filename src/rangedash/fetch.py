"""Row fetch collaborator.

:class:`RowFetcher` is the structural interface the orchestrator depends
on. :class:`HttpRowFetcher` is a small aiohttp implementation against the
JSONPlaceholder ``/posts`` endpoint, which has no date filtering: each post
is turned into a :class:`DataRow` dated somewhere inside the requested
range.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, Protocol

import aiohttp

from rangedash.config import DashboardConfig
from rangedash.exceptions import FetchError
from rangedash.models import DataRow, RowStatus

_logger = logging.getLogger(__name__)

REQUEST_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"
_POSTS_ENDPOINT = "/posts"


class RowFetcher(Protocol):
    """Structural fetch interface used by the orchestrator.

    Implementations raise :class:`FetchError` on failure.
    """

    async def fetch_rows(self, start: str, end: str) -> Sequence[Any]:
        ...


def format_request_datetime(value: date | datetime, numeric_offset: str) -> str:
    """Render ``value`` as ``yyyy-MM-dd HH:mm:ss ±hhmm``.

    Plain dates are taken at midnight. *numeric_offset* is appended as is
    (see :attr:`TimezoneOption.numeric_offset`).
    """
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return f"{value:%Y-%m-%d %H:%M:%S} {numeric_offset}"


def parse_request_datetime(value: str) -> datetime:
    """Inverse of :func:`format_request_datetime`; bare ISO dates are accepted too."""
    text = value.strip()
    try:
        return datetime.strptime(text, REQUEST_DATETIME_FORMAT)
    except ValueError:
        return datetime.fromisoformat(text)


class HttpRowFetcher:
    """aiohttp-backed :class:`RowFetcher`.

    Usage::

        async with HttpRowFetcher(config) as fetcher:
            rows = await fetcher.fetch_rows(start, end)
    """

    def __init__(
        self,
        config: DashboardConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or DashboardConfig()
        self._external_session = session is not None
        self._http_session = session
        self._rng = rng or random.Random()

    async def __aenter__(self) -> HttpRowFetcher:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            raise FetchError("Fetcher not initialized. Use 'async with HttpRowFetcher(...) as fetcher:'")
        return self._http_session

    async def _get_json(self, endpoint: str) -> Any:
        url = f"{self._config.api_base_url}{endpoint}"
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)
        _logger.debug("GET %s", url)

        try:
            async with self._require_session().get(url, timeout=timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise FetchError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except FetchError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise FetchError(f"Invalid JSON from {endpoint}: {text[:200]}", endpoint=endpoint) from exc

    async def fetch_rows(self, start: str, end: str) -> list[DataRow]:
        """Fetch posts and date them uniformly inside ``[start, end]``.

        Rows come back ordered by date.
        """
        start_dt = parse_request_datetime(start)
        end_dt = parse_request_datetime(end)
        payload = await self._get_json(_POSTS_ENDPOINT)
        if not isinstance(payload, list):
            raise FetchError(f"Expected a list from {_POSTS_ENDPOINT}", endpoint=_POSTS_ENDPOINT)

        statuses = list(RowStatus)
        span = (end_dt - start_dt).total_seconds()
        rows: list[DataRow] = []
        for post in payload[: self._config.fetch_limit]:
            if not isinstance(post, dict):
                raise FetchError(f"Malformed post in {_POSTS_ENDPOINT}", endpoint=_POSTS_ENDPOINT)
            try:
                post_id = int(post["id"])
                title = str(post.get("title", ""))[:30]
                body = str(post.get("body", ""))[:100]
            except (KeyError, TypeError, ValueError) as exc:
                raise FetchError(f"Malformed post in {_POSTS_ENDPOINT}: {exc}", endpoint=_POSTS_ENDPOINT) from exc
            moment = start_dt.timestamp() + self._rng.random() * span
            rows.append(
                DataRow(
                    id=post_id,
                    date=datetime.fromtimestamp(moment, tz=start_dt.tzinfo).date(),
                    title=title,
                    description=body,
                    status=self._rng.choice(statuses),
                )
            )

        rows.sort(key=lambda row: row.date)
        return rows
