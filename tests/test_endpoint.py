from moonraker_deck.endpoint import build_request
from moonraker_deck.settings import MonitorSettings

QUERY = "/printer/objects/query?print_stats&heater_bed&extruder&display_status&virtual_sdcard"


def _request(**raw):
    raw.setdefault("pollingInterval", 5)
    return build_request(MonitorSettings.from_raw(raw))


def test_prepends_scheme():
    req = _request(baseUrl="192.168.1.50")
    assert req.url == f"http://192.168.1.50{QUERY}"


def test_keeps_explicit_scheme():
    assert _request(baseUrl="https://printer.local").url == f"https://printer.local{QUERY}"
    assert _request(baseUrl="http://printer.local").url == f"http://printer.local{QUERY}"


def test_port_strips_one_trailing_slash():
    assert _request(baseUrl="http://printer.local/", port="7125").url == f"http://printer.local:7125{QUERY}"
    assert _request(baseUrl="printer.local//", port=7125).url == f"http://printer.local/:7125{QUERY}"


def test_port_then_scheme():
    assert _request(baseUrl="printer.local", port=7125).url == f"http://printer.local:7125{QUERY}"


def test_trailing_slash_kept_without_port():
    assert _request(baseUrl="printer.local/").url == f"http://printer.local/{QUERY}"


def test_headers_without_key():
    assert _request(baseUrl="printer.local").headers == {"Content-Type": "application/json"}


def test_headers_with_key():
    req = _request(baseUrl="printer.local", apiKey="abc123")
    assert req.headers == {"Content-Type": "application/json", "X-Api-Key": "abc123"}


def test_deterministic():
    raw = {"baseUrl": "printer.local/", "port": "80", "apiKey": "k", "pollingInterval": 5}
    assert _request(**raw) == _request(**raw)


def test_malformed_address_passes_through():
    req = _request(baseUrl="not a host::")
    assert req.url == f"http://not a host::{QUERY}"


def test_total_on_empty_settings():
    assert build_request(MonitorSettings()).url == f"http://{QUERY}"
