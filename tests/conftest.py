from unittest.mock import AsyncMock, MagicMock

import pytest

from moonraker_deck.const import (
    CONF_BASE_URL,
    CONF_DISPLAY_BED_TEMP,
    CONF_DISPLAY_HOTEND_TEMP,
    CONF_DISPLAY_LAYER_INFO,
    CONF_DISPLAY_PRINT_PROGRESS,
    CONF_DISPLAY_PRINT_STATUS,
    CONF_POLLING_INTERVAL,
)


def make_settings(**overrides):
    """Raw property-inspector settings bag with every toggle on."""
    base = {
        CONF_BASE_URL: "192.168.1.50",
        CONF_POLLING_INTERVAL: 5,
        CONF_DISPLAY_BED_TEMP: True,
        CONF_DISPLAY_HOTEND_TEMP: True,
        CONF_DISPLAY_PRINT_STATUS: True,
        CONF_DISPLAY_PRINT_PROGRESS: True,
        CONF_DISPLAY_LAYER_INFO: True,
    }
    base.update(overrides)
    return base


def make_status(state="printing", **overrides):
    """Moonraker ``result.status`` payload for an in-progress print."""
    base = {
        "heater_bed": {"temperature": 59.6, "target": 60},
        "extruder": {"temperature": 204.4, "target": 205},
        "print_stats": {"state": state, "info": {"current_layer": 12, "total_layer": 100}},
        "virtual_sdcard": {"progress": 0.12},
    }
    base.update(overrides)
    return base


def make_session(status=200, body=b"", reason="OK", exc=None):
    """aiohttp.ClientSession mock whose ``get()`` yields one canned response.

    ``session.get(url)`` returns an async context manager, not a coroutine,
    so the response is handed out from ``__aenter__``.
    """
    resp = MagicMock()
    resp.status = status
    resp.reason = reason
    resp.read = AsyncMock(return_value=body)
    resp.text = AsyncMock(return_value=body.decode("utf-8", "replace"))

    get_cm = MagicMock()
    get_cm.__aenter__ = AsyncMock(return_value=resp, side_effect=exc)
    get_cm.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.get = MagicMock(return_value=get_cm)
    return session


class FakePresenter:
    def __init__(self):
        self.calls = []

    async def async_present(self, context, display):
        self.calls.append((context, display))

    def titles(self, context=None):
        return [d.title for c, d in self.calls if context is None or c == context]


@pytest.fixture
def presenter():
    return FakePresenter()
