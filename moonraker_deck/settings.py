from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

import voluptuous as vol

from .const import (
    CONF_API_KEY,
    CONF_BASE_URL,
    CONF_DISPLAY_BED_TEMP,
    CONF_DISPLAY_HOTEND_TEMP,
    CONF_DISPLAY_LAYER_INFO,
    CONF_DISPLAY_PRINT_PROGRESS,
    CONF_DISPLAY_PRINT_STATUS,
    CONF_POLLING_INTERVAL,
    CONF_PORT,
)
from .errors import InvalidSettingsError

_LOGGER = logging.getLogger(__name__)


def _not_bool(value):
    # bool is an int subclass; True must not read as a 1s interval or port 1
    if isinstance(value, bool):
        raise vol.Invalid("boolean not allowed")
    return value


def _port(value):
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


BASE_URL = vol.All(str, vol.Length(min=1))
PORT = vol.All(_not_bool, vol.Any(str, int, float), _port, vol.Length(min=1))
API_KEY = vol.All(str, vol.Length(min=1))
POLLING_INTERVAL = vol.All(_not_bool, vol.Coerce(float), vol.Range(min=0, min_included=False))
TOGGLE = vol.Boolean()


def _field(raw: Mapping[str, Any], key: str, validator: Callable[[Any], Any], default=None):
    """Validate one optional field, falling back to its default when malformed."""
    value = raw.get(key)
    if value is None:
        return default
    try:
        return validator(value)
    except vol.Invalid as e:
        _LOGGER.debug("Ignoring malformed setting %s: %s", key, e)
        return default


@dataclass(frozen=True)
class DisplayToggles:
    bed_temp: bool = False
    hotend_temp: bool = False
    print_status: bool = False
    print_progress: bool = False
    layer_info: bool = False


@dataclass(frozen=True)
class MonitorSettings:
    """Normalized per-key settings bag as sent by the property inspector."""

    base_url: Optional[str] = None
    port: Optional[str] = None
    api_key: Optional[str] = None
    polling_interval: Optional[float] = None
    toggles: DisplayToggles = field(default_factory=DisplayToggles)

    @classmethod
    def from_raw(cls, raw: Any) -> "MonitorSettings":
        if not isinstance(raw, Mapping):
            return cls()
        return cls(
            base_url=_field(raw, CONF_BASE_URL, BASE_URL),
            port=_field(raw, CONF_PORT, PORT),
            api_key=_field(raw, CONF_API_KEY, API_KEY),
            polling_interval=_field(raw, CONF_POLLING_INTERVAL, POLLING_INTERVAL),
            toggles=DisplayToggles(
                bed_temp=_field(raw, CONF_DISPLAY_BED_TEMP, TOGGLE, False),
                hotend_temp=_field(raw, CONF_DISPLAY_HOTEND_TEMP, TOGGLE, False),
                print_status=_field(raw, CONF_DISPLAY_PRINT_STATUS, TOGGLE, False),
                print_progress=_field(raw, CONF_DISPLAY_PRINT_PROGRESS, TOGGLE, False),
                layer_info=_field(raw, CONF_DISPLAY_LAYER_INFO, TOGGLE, False),
            ),
        )

    @property
    def is_valid(self) -> bool:
        return bool(self.base_url) and self.polling_interval is not None

    def require_valid(self) -> None:
        if not self.is_valid:
            raise InvalidSettingsError()


def is_valid(settings: Any) -> bool:
    """True when the bag has a base address and a positive polling interval."""
    if not isinstance(settings, MonitorSettings):
        settings = MonitorSettings.from_raw(settings)
    return settings.is_valid
