from __future__ import annotations

import logging
from typing import Any

from .const import ACTION_UUID
from .scheduler import InstanceScheduler
from .ws import StreamDeckConnection

__version__ = "0.1.0"

_LOGGER = logging.getLogger(__name__)


def _make_router(scheduler: InstanceScheduler):
    async def route(message: dict) -> None:
        event = message.get("event")
        action = message.get("action")
        context = message.get("context")
        if action is not None and action != ACTION_UUID:
            _LOGGER.debug("Ignoring %s for foreign action %s", event, action)
            return
        if not isinstance(context, str):
            _LOGGER.debug("Ignoring %s without a context", event)
            return

        payload = message.get("payload") or {}
        settings = payload.get("settings") if isinstance(payload, dict) else None
        if event == "willAppear":
            await scheduler.async_appear(context, settings or {})
        elif event == "willDisappear":
            await scheduler.async_disappear(context)
        elif event == "didReceiveSettings":
            await scheduler.async_settings_changed(context, settings or {})
        elif event == "keyDown":
            await scheduler.async_key_down(context)
        else:
            _LOGGER.debug("Unhandled event %s for %s", event, context)

    return route


async def async_setup(port: int, plugin_uuid: str, register_event: str) -> dict[str, Any]:
    connection = StreamDeckConnection(port, plugin_uuid, register_event)
    await connection.async_start()

    scheduler = InstanceScheduler(connection.session, connection)
    connection.add_listener(_make_router(scheduler))

    return {
        "connection": connection,
        "scheduler": scheduler,
    }


async def async_unload(data: dict[str, Any]) -> None:
    await data["scheduler"].async_shutdown()
    await data["connection"].async_stop()
