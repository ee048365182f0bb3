from __future__ import annotations

from typing import NamedTuple

from .const import API_KEY_HEADER, QUERY_OBJECTS, QUERY_PATH
from .settings import MonitorSettings

QUERY = f"{QUERY_PATH}?{'&'.join(QUERY_OBJECTS)}"


class PrinterRequest(NamedTuple):
    url: str
    headers: dict[str, str]


def build_request(settings: MonitorSettings) -> PrinterRequest:
    """Moonraker object query URL + headers for the configured host.

    Never raises: a malformed address is passed through and fails at fetch time.
    """
    url = settings.base_url or ""
    if settings.port:
        if url.endswith("/"):
            url = url[:-1]
        url = f"{url}:{settings.port}"

    if not url.startswith(("http://", "https://")):
        url = f"http://{url}"

    headers = {"Content-Type": "application/json"}
    if settings.api_key:
        headers[API_KEY_HEADER] = settings.api_key

    return PrinterRequest(f"{url}{QUERY}", headers)
