"""Plugin entry point, launched by the Stream Deck application.

    moonraker-deck -port 28196 -pluginUUID <uuid> -registerEvent registerPlugin -info '{...}'
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from . import __version__, async_setup, async_unload

_LOGGER = logging.getLogger("moonraker_deck")


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="moonraker-deck", description="Moonraker printer monitor for Stream Deck.")
    parser.add_argument("-port", type=int, required=True, help="Stream Deck websocket port")
    parser.add_argument("-pluginUUID", dest="plugin_uuid", required=True)
    parser.add_argument("-registerEvent", dest="register_event", required=True)
    parser.add_argument("-info", type=json.loads, default={}, help="Application/device info JSON")
    parser.add_argument("--log-level", default="DEBUG", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


async def _async_main(args: argparse.Namespace) -> None:
    data = await async_setup(args.port, args.plugin_uuid, args.register_event)
    try:
        await data["connection"].async_wait()
    finally:
        await async_unload(data)


def main(argv=None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    app = (args.info or {}).get("application", {}) if isinstance(args.info, dict) else {}
    _LOGGER.info(
        "moonraker-deck %s starting (Stream Deck %s on %s)",
        __version__, app.get("version", "?"), app.get("platform", "?"),
    )
    try:
        asyncio.run(_async_main(args))
    except KeyboardInterrupt:
        _LOGGER.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
