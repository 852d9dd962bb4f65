"""Dashboard configuration for rangedash."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from rangedash.exceptions import ConfigError

#: Default cache time-to-live in seconds (30 minutes).
DEFAULT_CACHE_TTL: float = 30 * 60


def _env_int(env: Mapping[str, str], key: str) -> int | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return float(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class DashboardConfig:
    """Dashboard configuration.

    Parameters
    ----------
    max_selection_range_days : int
        Longest span (end minus start, in whole days) a calendar selection
        may cover. A same-day selection has a span of ``0``.
    default_timezone : str
        Timezone value selected when the picker is mounted. Must exist in
        the timezone table handed to the picker.
    max_past_days : int
        Days further in the past than this are disabled in the calendar.
        The day exactly ``max_past_days`` ago is still selectable.
    cache_ttl : float
        Time-to-live of cached result sets, in seconds.
    initial_range_days : int
        Length of the range pre-selected on mount, ending today.
    api_base_url : str
        Base URL used by :class:`rangedash.fetch.HttpRowFetcher`.
    request_timeout : float
        Total timeout for a single fetch, in seconds.
    fetch_limit : int
        Maximum number of rows kept from a fetch response.
    """

    max_selection_range_days: int = 10
    default_timezone: str = "Asia/Calcutta"
    max_past_days: int = 90
    cache_ttl: float = DEFAULT_CACHE_TTL
    initial_range_days: int = 7
    api_base_url: str = "https://jsonplaceholder.typicode.com"
    request_timeout: float = 10.0
    fetch_limit: int = 20

    def __post_init__(self) -> None:
        if self.max_selection_range_days < 0:
            raise ConfigError("max_selection_range_days must be >= 0")
        if self.max_past_days < 0:
            raise ConfigError("max_past_days must be >= 0")
        if self.cache_ttl < 0:
            raise ConfigError("cache_ttl must be >= 0")
        if self.initial_range_days < 0:
            raise ConfigError("initial_range_days must be >= 0")
        if self.fetch_limit <= 0:
            raise ConfigError("fetch_limit must be > 0")

    @classmethod
    def from_env(cls, **overrides: Any) -> DashboardConfig:
        """Create configuration from environment variables.

        Reads optional ``RANGEDASH_*`` variables. Explicit keyword
        arguments override environment values.

        Raises
        ------
        ConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        timezone = env.get("RANGEDASH_DEFAULT_TIMEZONE")
        if timezone is not None:
            config_kwargs["default_timezone"] = timezone.strip()

        base_url = env.get("RANGEDASH_API_BASE_URL")
        if base_url is not None:
            config_kwargs["api_base_url"] = base_url.strip().rstrip("/")

        _ENV_INT_MAP = {
            "RANGEDASH_MAX_SELECTION_RANGE_DAYS": "max_selection_range_days",
            "RANGEDASH_MAX_PAST_DAYS": "max_past_days",
            "RANGEDASH_INITIAL_RANGE_DAYS": "initial_range_days",
            "RANGEDASH_FETCH_LIMIT": "fetch_limit",
        }
        for env_key, field_name in _ENV_INT_MAP.items():
            if field_name in overrides:
                continue
            int_value = _env_int(env, env_key)
            if int_value is not None:
                config_kwargs[field_name] = int_value

        _ENV_FLOAT_MAP = {
            "RANGEDASH_CACHE_TTL": "cache_ttl",
            "RANGEDASH_REQUEST_TIMEOUT": "request_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            if field_name in overrides:
                continue
            float_value = _env_float(env, env_key)
            if float_value is not None:
                config_kwargs[field_name] = float_value

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
