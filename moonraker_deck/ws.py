from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any, Awaitable, Callable, Optional

import aiohttp

from .const import HEARTBEAT_SEC, HOST_WS_URL, RECONNECT_BACKOFF
from .display import KeyDisplay

_LOGGER = logging.getLogger(__name__)

# setTitle/setImage target: hardware and software keys
TARGET_BOTH = 0


class StreamDeckConnection:
    """Stream Deck plugin websocket client (ws://127.0.0.1:<port>) and key presenter."""

    def __init__(self, port: int, plugin_uuid: str, register_event: str):
        self._url = HOST_WS_URL.format(port=port)
        self._plugin_uuid = plugin_uuid
        self._register_event = register_event
        self._session: Optional[aiohttp.ClientSession] = None
        self._task: Optional[asyncio.Task] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None

        # Outgoing envelopes ({"event": ..., "context": ..., "payload": {...}})
        self._out_queue: "asyncio.Queue[dict]" = asyncio.Queue()

        self._listeners: list[Callable[[dict], Awaitable[None]]] = []
        self._handlers: set[asyncio.Task] = set()

    # ---------- Public API ----------

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("Connection not started")
        return self._session

    def add_listener(self, cb: Callable[[dict], Awaitable[None]]) -> None:
        self._listeners.append(cb)

    async def async_start(self) -> None:
        self._session = aiohttp.ClientSession()
        self._task = asyncio.create_task(self._runner())

    async def async_stop(self) -> None:
        for t in list(self._handlers):
            t.cancel()
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        if self._ws and not self._ws.closed:
            await self._ws.close()
        if self._session:
            await self._session.close()

    async def async_wait(self) -> None:
        """Block until the connection task ends (it only ends when cancelled)."""
        if self._task:
            await self._task

    async def set_title(self, context: str, title: str) -> None:
        self._send({"event": "setTitle", "context": context, "payload": {"title": title, "target": TARGET_BOTH}})

    async def set_image(self, context: str, image: Optional[str]) -> None:
        """Set the key image; None reverts to the manifest icon."""
        payload: dict[str, Any] = {"target": TARGET_BOTH}
        if image is not None:
            payload["image"] = image
        self._send({"event": "setImage", "context": context, "payload": payload})

    async def async_present(self, context: str, display: KeyDisplay) -> None:
        await self.set_title(context, display.title)
        if not display.keep_icon:
            await self.set_image(context, display.icon.path if display.icon else None)

    # ---------- Internal: WS loop ----------

    def _send(self, envelope: dict) -> None:
        self._out_queue.put_nowait(envelope)

    async def _runner(self):
        backoffs = iter(RECONNECT_BACKOFF)
        while True:
            try:
                _LOGGER.info("Connecting to %s", self._url)
                async with self.session.ws_connect(self._url, heartbeat=HEARTBEAT_SEC) as ws:
                    self._ws = ws
                    await ws.send_str(json.dumps({"event": self._register_event, "uuid": self._plugin_uuid}))
                    backoffs = iter(RECONNECT_BACKOFF)
                    _LOGGER.info("Registered plugin %s", self._plugin_uuid)

                    receiver = asyncio.create_task(self._recv_loop(ws))
                    sender = asyncio.create_task(self._send_loop(ws))
                    done, pending = await asyncio.wait(
                        {receiver, sender}, return_when=asyncio.FIRST_COMPLETED
                    )
                    for task in pending:
                        task.cancel()
                        with contextlib.suppress(asyncio.CancelledError):
                            await task
                    for task in done:
                        task.result()
                raise ConnectionError("Stream Deck closed the connection")
            except Exception as e:
                _LOGGER.warning("WS disconnected (%s). Reconnecting…", e)
                await asyncio.sleep(next(backoffs, RECONNECT_BACKOFF[-1]))

    async def _recv_loop(self, ws: aiohttp.ClientWebSocketResponse):
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                try:
                    data = json.loads(msg.data)
                except ValueError as e:
                    _LOGGER.debug("Bad JSON from WS: %s", e)
                    continue
                if not isinstance(data, dict):
                    _LOGGER.debug("Ignoring non-object WS frame (%s)", type(data).__name__)
                    continue
                _LOGGER.debug("WS <- %s action=%s context=%s", data.get("event"), data.get("action"), data.get("context"))
                self._dispatch(data)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise RuntimeError(f"WS error: {ws.exception()}")

    async def _send_loop(self, ws: aiohttp.ClientWebSocketResponse):
        """Drain queued envelopes to the Stream Deck application."""
        while not ws.closed:
            envelope = await self._out_queue.get()
            try:
                await ws.send_str(json.dumps(envelope))
                _LOGGER.debug("WS -> %s", envelope)
            except (aiohttp.ClientError, ConnectionError) as e:
                _LOGGER.debug("Failed to send WS message: %s", e)

    def _dispatch(self, data: dict) -> None:
        # Handlers may await network I/O; keep receiving while they run
        for cb in self._listeners:
            task = asyncio.create_task(cb(data))
            self._handlers.add(task)
            task.add_done_callback(self._handler_done)

    def _handler_done(self, task: asyncio.Task) -> None:
        self._handlers.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _LOGGER.error("Event handler crashed: %s", exc, exc_info=exc)
