from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from .const import REQUEST_TIMEOUT_SEC
from .endpoint import PrinterRequest
from .errors import HttpError, ParseError, TransportError

_LOGGER = logging.getLogger(__name__)


async def async_fetch_status(session: aiohttp.ClientSession, request: PrinterRequest) -> dict[str, Any]:
    """GET the object query and return ``result.status`` unchanged.

    Raises TransportError, HttpError or ParseError. One round-trip per call,
    no retries.
    """
    _LOGGER.debug("GET %s", request.url)
    timeout = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_SEC)
    try:
        async with session.get(request.url, headers=request.headers, timeout=timeout) as r:
            if r.status < 200 or r.status >= 300:
                try:
                    body = await r.text()
                except (aiohttp.ClientError, UnicodeDecodeError):
                    body = ""
                raise HttpError(r.status, body, reason=r.reason)
            raw = await r.read()
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        # InvalidURL is both a ClientError and a ValueError
        raise TransportError(str(e) or type(e).__name__, extra={"url": request.url}) from e

    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"Bad JSON from printer: {e}") from e

    result = data.get("result") if isinstance(data, dict) else None
    status = result.get("status") if isinstance(result, dict) else None
    if not isinstance(status, dict):
        raise ParseError("Missing result.status in printer response")
    return status
