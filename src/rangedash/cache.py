"""In-memory TTL cache for fetched result sets.

Entries expire lazily: freshness is checked when an entry is read, and
nothing is removed unless the caller asks for it (``remove``, ``clear``,
``purge_expired``) or overwrites the key.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Generic, TypeVar

from rangedash.config import DEFAULT_CACHE_TTL

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached value with its storage and expiry times (clock seconds)."""

    value: T
    stored_at: float
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now <= self.expires_at


class TTLCache(Generic[T]):
    """Keyed store with a per-entry time-to-live.

    A key maps to at most one entry; ``put`` replaces it whole. There is no
    capacity bound.

    Parameters
    ----------
    default_ttl : float
        TTL in seconds used when ``put`` is called without one.
    clock : callable
        Monotonic clock returning seconds. Tests inject a fake.
    """

    def __init__(
        self,
        *,
        default_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def put(self, key: str, value: T, ttl: float | None = None) -> CacheEntry[T]:
        """Store *value* under *key*, overwriting any existing entry."""
        now = self._clock()
        lifetime = self._default_ttl if ttl is None else ttl
        entry = CacheEntry(value=value, stored_at=now, expires_at=now + lifetime)
        self._entries[key] = entry
        _logger.debug("Cache put %s (ttl=%.1fs)", key, lifetime)
        return entry

    def get(self, key: str) -> T | None:
        """Return the cached value if present and not expired, else ``None``.

        Expired entries are left in place.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock()):
            _logger.debug("Cache entry %s expired", key)
            return None
        return entry.value

    def entry(self, key: str) -> CacheEntry[T] | None:
        """Return the stored entry for *key*, fresh or not."""
        return self._entries.get(key)

    def remove(self, key: str) -> bool:
        """Remove *key*; return whether an entry was stored."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        stale = [key for key, entry in self._entries.items() if not entry.is_fresh(now)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def _calendar_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def cache_key(start: date | datetime, end: date | datetime, timezone: str) -> str:
    """Build the cache key for a range query.

    Dates are reduced to calendar days, so two ranges that differ only in
    time of day share a key.
    """
    return f"{_calendar_day(start).isoformat()}|{_calendar_day(end).isoformat()}|{timezone}"
