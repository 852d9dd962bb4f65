"""Custom exception hierarchy for rangedash."""

from __future__ import annotations


class RangeDashError(Exception):
    """Base exception for all rangedash errors."""


class ConfigError(RangeDashError):
    """Invalid or missing configuration."""


class SelectionError(RangeDashError):
    """A calendar selection could not be committed."""


class SelectionSpanError(SelectionError):
    """The selected range is longer than the configured maximum.

    This is a recoverable validation failure: the calendar stays anchored
    on the first date and the error is handed to listeners, never raised.
    """

    def __init__(self, message: str, *, span_days: int, max_days: int) -> None:
        self.span_days = span_days
        self.max_days = max_days
        super().__init__(message)


class FetchError(RangeDashError):
    """Row fetch failed (network, non-200, invalid payload)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
