"""Timezone label and offset lookup.

The offsets here are static display data, not computed from a tz database:
the dashboard shows and sends exactly what the table says.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, field_validator

from rangedash.exceptions import ConfigError

_OFFSET_RE = re.compile(r"^([+-])(\d{1,2})(?::(\d{2}))?$")


class TimezoneOption(BaseModel):
    """One selectable timezone.

    ``offset`` is the short display form used after ``GMT``, e.g. ``+5:30``
    or ``-8``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    label: str
    value: str
    offset: str

    @field_validator("offset")
    @classmethod
    def _check_offset(cls, value: str) -> str:
        if not _OFFSET_RE.match(value):
            raise ValueError(f"offset must look like '+5:30' or '-8', got {value!r}")
        return value

    @property
    def numeric_offset(self) -> str:
        """Offset in ``±hhmm`` form, e.g. ``+0530``."""
        match = _OFFSET_RE.match(self.offset)
        assert match is not None  # noqa: S101
        sign, hours, minutes = match.groups()
        return f"{sign}{int(hours):02d}{int(minutes or 0):02d}"


DEFAULT_TIMEZONE_OPTIONS: tuple[TimezoneOption, ...] = (
    TimezoneOption(label="Asia/Calcutta (GMT+5:30)", value="Asia/Calcutta", offset="+5:30"),
    TimezoneOption(label="Asia/Dubai (GMT+4)", value="Asia/Dubai", offset="+4"),
    TimezoneOption(label="Europe/Moscow (GMT+3)", value="Europe/Moscow", offset="+3"),
    TimezoneOption(label="Europe/London (GMT+0)", value="Europe/London", offset="+0"),
    TimezoneOption(label="America/New_York (GMT-5)", value="America/New_York", offset="-5"),
    TimezoneOption(label="America/Los_Angeles (GMT-8)", value="America/Los_Angeles", offset="-8"),
)


class TimezoneTable:
    """Ordered lookup of :class:`TimezoneOption` by value."""

    def __init__(self, options: Iterable[TimezoneOption] = DEFAULT_TIMEZONE_OPTIONS) -> None:
        self._options: dict[str, TimezoneOption] = {}
        for option in options:
            if option.value in self._options:
                raise ConfigError(f"duplicate timezone value {option.value!r}")
            self._options[option.value] = option
        if not self._options:
            raise ConfigError("timezone table must not be empty")

    def get(self, value: str) -> TimezoneOption | None:
        return self._options.get(value)

    def require(self, value: str) -> TimezoneOption:
        """Return the option for *value* or raise :class:`ConfigError`."""
        option = self._options.get(value)
        if option is None:
            raise ConfigError(f"unknown timezone {value!r}")
        return option

    def display_offset(self, value: str) -> str:
        return self.require(value).offset

    def numeric_offset(self, value: str) -> str:
        return self.require(value).numeric_offset

    def __contains__(self, value: object) -> bool:
        return value in self._options

    def __iter__(self) -> Iterator[TimezoneOption]:
        return iter(self._options.values())

    def __len__(self) -> int:
        return len(self._options)
