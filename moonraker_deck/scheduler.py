from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol

import aiohttp

from .const import TITLE_FETCH_ERROR, TITLE_SETTINGS_REQUIRED
from .display import KeyDisplay, render
from .endpoint import PrinterRequest, build_request
from .errors import FetchError, HttpError, InvalidSettingsError
from .fetcher import async_fetch_status
from .settings import MonitorSettings

_LOGGER = logging.getLogger(__name__)

Fetcher = Callable[[aiohttp.ClientSession, PrinterRequest], Awaitable[dict[str, Any]]]


class KeyPresenter(Protocol):
    async def async_present(self, context: str, display: KeyDisplay) -> None:
        ...


@dataclass
class _Instance:
    settings: MonitorSettings
    token: Optional[int] = None
    timer: Optional[asyncio.Task] = None


class InstanceScheduler:
    """Owns one polling timer per visible key and the records behind them.

    Every (re)evaluation takes a fresh token from a counter and stores it on
    the instance record. A timer only acts while its token is still the
    record's token, so timers from an older settings generation go quiet.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        presenter: KeyPresenter,
        *,
        fetcher: Fetcher = async_fetch_status,
    ):
        self._session = session
        self._presenter = presenter
        self._fetcher = fetcher
        self._instances: dict[str, _Instance] = {}
        self._tokens = itertools.count(1)

    # ---------- Lifecycle events ----------

    async def async_appear(self, context: str, raw_settings: Any) -> None:
        if context in self._instances:
            self._stop_polling(context)
        self._instances[context] = _Instance(MonitorSettings.from_raw(raw_settings))
        _LOGGER.info("Action %s appeared. Initializing with settings.", context)
        await self._async_evaluate(context)

    async def async_disappear(self, context: str) -> None:
        _LOGGER.info("Action %s disappearing. Stopping polling and cleaning up state.", context)
        self._stop_polling(context)
        self._instances.pop(context, None)

    async def async_settings_changed(self, context: str, raw_settings: Any) -> None:
        settings = MonitorSettings.from_raw(raw_settings)
        inst = self._instances.get(context)
        if inst is None:
            _LOGGER.warning("Received settings for action %s but no prior state found. Initializing.", context)
            self._instances[context] = _Instance(settings)
        else:
            inst.settings = settings
        _LOGGER.info("Received new settings for action %s. Applying and restarting polling.", context)
        await self._async_evaluate(context)

    async def async_key_down(self, context: str) -> None:
        inst = self._instances.get(context)
        if inst is None:
            _LOGGER.warning("Key pressed for action %s, but no state found.", context)
            return
        _LOGGER.info("Key pressed for action %s, forcing data fetch.", context)
        await self._async_cycle(context, inst.settings)

    async def async_shutdown(self) -> None:
        for context in list(self._instances):
            self._stop_polling(context)
        self._instances.clear()

    # ---------- Internal: timers ----------

    def _stop_polling(self, context: str) -> None:
        inst = self._instances.get(context)
        if inst is None:
            return
        inst.token = None
        if inst.timer:
            inst.timer.cancel()
            inst.timer = None
            _LOGGER.info("Stopped polling timer for action %s.", context)

    async def _async_evaluate(self, context: str) -> None:
        self._stop_polling(context)
        inst = self._instances[context]
        token = next(self._tokens)
        inst.token = token
        settings = inst.settings

        if not settings.is_valid:
            _LOGGER.warning(
                "Settings for action %s are invalid. Polling not started. Displaying \"Settings Required\".",
                context,
            )
            await self._async_present(context, KeyDisplay.placeholder(TITLE_SETTINGS_REQUIRED))
            return

        _LOGGER.info("Settings for action %s are valid. Performing initial data fetch and starting polling.", context)
        await self._async_cycle(context, settings)

        # the record may have been replaced or re-evaluated while we fetched
        if self._instances.get(context) is not inst or inst.token != token:
            _LOGGER.debug("Evaluation %s for action %s was superseded; not scheduling.", token, context)
            return

        interval = settings.polling_interval
        _LOGGER.info("Polling interval for action %s set to %s seconds.", context, interval)
        inst.timer = asyncio.create_task(self._poll_loop(context, token, interval))

    async def _poll_loop(self, context: str, token: int, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            if not await self._async_tick(context, token):
                return

    async def _async_tick(self, context: str, token: int) -> bool:
        """Run one timer-driven cycle; False when this timer is stale."""
        inst = self._instances.get(context)
        if inst is None:
            _LOGGER.warning("Polling timer (%s) fired for action %s, but its state was not found.", token, context)
            return False
        if inst.token != token:
            _LOGGER.warning(
                "Polling timer (%s) fired for action %s, but it's an old timer. Active timer is %s.",
                token, context, inst.token,
            )
            return False

        _LOGGER.debug("Polling timer (%s) fired for action: %s. Fetching data.", token, context)
        # cancelling the timer must not abort a request already on the wire
        await asyncio.shield(self._async_cycle(context, inst.settings))
        return True

    # ---------- Internal: fetch-render-present ----------

    async def _async_cycle(self, context: str, settings: MonitorSettings) -> None:
        try:
            settings.require_valid()
        except InvalidSettingsError as e:
            _LOGGER.warning("Action %s: %s Aborting fetch.", context, e)
            await self._async_present(context, KeyDisplay.placeholder(e.key_title))
            return

        request = build_request(settings)
        _LOGGER.debug("Action %s: fetching from endpoint: %s", context, request.url)
        try:
            status = await self._fetcher(self._session, request)
            display = render(status, settings.toggles)
        except HttpError as e:
            _LOGGER.error(
                "Action %s: Moonraker API error %s from %s - Response: %s",
                context, e.status, request.url, e.body,
            )
            display = KeyDisplay.placeholder(e.key_title)
        except FetchError as e:
            _LOGGER.error("Action %s: %s fetching %s: %s %s", context, type(e).__name__, request.url, e, e.extra)
            display = KeyDisplay.placeholder(e.key_title)
        except Exception:
            _LOGGER.exception("Action %s: exception during fetch or data processing (%s)", context, request.url)
            display = KeyDisplay.placeholder(TITLE_FETCH_ERROR)
        else:
            _LOGGER.debug("Action %s: rendered %r", context, display)

        await self._async_present(context, display)

    async def _async_present(self, context: str, display: KeyDisplay) -> None:
        if context not in self._instances:
            _LOGGER.debug("Action %s is gone; dropping presentation %r", context, display.title)
            return
        try:
            await self._presenter.async_present(context, display)
        except Exception as e:
            _LOGGER.warning("Action %s: failed to present to key: %s", context, e)
