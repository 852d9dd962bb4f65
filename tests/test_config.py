from __future__ import annotations

import pytest
from pydantic import ValidationError

from rangedash.config import DEFAULT_CACHE_TTL, DashboardConfig
from rangedash.exceptions import ConfigError
from rangedash.timezones import DEFAULT_TIMEZONE_OPTIONS, TimezoneOption, TimezoneTable


def test_defaults() -> None:
    config = DashboardConfig()
    assert config.max_selection_range_days == 10
    assert config.default_timezone == "Asia/Calcutta"
    assert config.max_past_days == 90
    assert config.cache_ttl == DEFAULT_CACHE_TTL == 1800


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RANGEDASH_MAX_SELECTION_RANGE_DAYS", " 14 ")
    monkeypatch.setenv("RANGEDASH_CACHE_TTL", "60.5")
    monkeypatch.setenv("RANGEDASH_DEFAULT_TIMEZONE", "Europe/London")
    monkeypatch.setenv("RANGEDASH_API_BASE_URL", "http://localhost:9000/")

    config = DashboardConfig.from_env()

    assert config.max_selection_range_days == 14
    assert config.cache_ttl == 60.5
    assert config.default_timezone == "Europe/London"
    assert config.api_base_url == "http://localhost:9000"


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RANGEDASH_MAX_PAST_DAYS", "not-a-number")
    config = DashboardConfig.from_env(max_past_days=30)
    assert config.max_past_days == 30


def test_from_env_rejects_bad_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RANGEDASH_FETCH_LIMIT", "many")
    with pytest.raises(ConfigError, match="RANGEDASH_FETCH_LIMIT"):
        DashboardConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_selection_range_days": -1},
        {"max_past_days": -5},
        {"cache_ttl": -1.0},
        {"fetch_limit": 0},
    ],
)
def test_out_of_range_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(ConfigError):
        DashboardConfig(**kwargs)  # type: ignore[arg-type]


def test_numeric_offsets() -> None:
    table = TimezoneTable()
    assert table.numeric_offset("Asia/Calcutta") == "+0530"
    assert table.numeric_offset("America/Los_Angeles") == "-0800"
    assert table.numeric_offset("Europe/London") == "+0000"
    assert table.display_offset("Asia/Dubai") == "+4"


def test_default_table_order_is_preserved() -> None:
    assert [option.value for option in TimezoneTable()] == [option.value for option in DEFAULT_TIMEZONE_OPTIONS]
    assert len(TimezoneTable()) == 6
    assert "Europe/Moscow" in TimezoneTable()


def test_unknown_and_duplicate_timezones() -> None:
    table = TimezoneTable()
    assert table.get("Mars/Olympus") is None
    with pytest.raises(ConfigError):
        table.require("Mars/Olympus")

    option = TimezoneOption(label="UTC", value="UTC", offset="+0")
    with pytest.raises(ConfigError):
        TimezoneTable([option, option])
    with pytest.raises(ConfigError):
        TimezoneTable([])


def test_offset_format_is_validated() -> None:
    with pytest.raises(ValidationError):
        TimezoneOption(label="Bad", value="Bad/Zone", offset="GMT+1")
