"""Failures a fetch-render cycle can hit, each with the title it shows on the key."""
from __future__ import annotations

from typing import Any, Optional

from .const import (
    TITLE_FETCH_ERROR,
    TITLE_HOST_DOWN,
    TITLE_PARSE_ERROR,
    TITLE_SETTINGS_INVALID,
)


class MonitorError(Exception):
    """Base class for errors scoped to one fetch-render cycle."""

    key_title = TITLE_FETCH_ERROR
    default_detail = "Unexpected monitor failure."

    def __init__(self, detail: Optional[str] = None, *, extra: Optional[dict[str, Any]] = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail
        self.extra = extra or {}


class InvalidSettingsError(MonitorError):
    key_title = TITLE_SETTINGS_INVALID
    default_detail = "Base address and a positive polling interval are required."


class FetchError(MonitorError):
    """Raised by the status fetcher; never escapes a cycle."""


class TransportError(FetchError):
    key_title = TITLE_HOST_DOWN
    default_detail = "Printer host unreachable."


class HttpError(FetchError):
    default_detail = "Printer API returned an error status."

    def __init__(self, status: int, body: str = "", *, reason: Optional[str] = None) -> None:
        super().__init__(f"HTTP {status} {reason or ''}".strip(), extra={"status": status})
        self.status = status
        self.body = body

    @property
    def key_title(self) -> str:
        return f"Error:\n{self.status}"


class ParseError(FetchError):
    key_title = TITLE_PARSE_ERROR
    default_detail = "Response is not a Moonraker status envelope."
