import logging

import pytest

from moonraker_deck.errors import InvalidSettingsError
from moonraker_deck.settings import DisplayToggles, MonitorSettings, is_valid
from tests.conftest import make_settings


class TestIsValid:

    def test_base_url_and_positive_interval(self):
        assert is_valid({"baseUrl": "printer.local", "pollingInterval": 5})

    @pytest.mark.parametrize("raw", [
        {},
        {"pollingInterval": 5},
        {"baseUrl": "", "pollingInterval": 5},
        {"baseUrl": None, "pollingInterval": 5},
        {"baseUrl": "printer.local"},
        {"baseUrl": "printer.local", "pollingInterval": 0},
        {"baseUrl": "printer.local", "pollingInterval": -3},
        {"baseUrl": "printer.local", "pollingInterval": "soon"},
        {"baseUrl": "printer.local", "pollingInterval": True},
        {"baseUrl": "printer.local", "pollingInterval": float("nan")},
        {"baseUrl": 42, "pollingInterval": 5},
    ])
    def test_rejects_insufficient_settings(self, raw):
        assert is_valid(raw) is False

    @pytest.mark.parametrize("raw", [None, "baseUrl", 7, ["baseUrl"]])
    def test_never_raises_on_garbage(self, raw):
        assert is_valid(raw) is False

    def test_numeric_string_interval_accepted(self):
        assert is_valid({"baseUrl": "printer.local", "pollingInterval": "2.5"})

    def test_accepts_normalized_settings(self):
        assert is_valid(MonitorSettings.from_raw(make_settings()))


class TestFromRaw:

    def test_normalizes_all_fields(self):
        s = MonitorSettings.from_raw(make_settings(port=7125, apiKey="secret"))
        assert s.base_url == "192.168.1.50"
        assert s.port == "7125"
        assert s.api_key == "secret"
        assert s.polling_interval == 5.0
        assert s.toggles == DisplayToggles(True, True, True, True, True)

    def test_toggles_default_off(self):
        s = MonitorSettings.from_raw({"baseUrl": "x", "pollingInterval": 1})
        assert s.toggles == DisplayToggles()

    def test_malformed_optional_field_falls_back(self):
        s = MonitorSettings.from_raw(make_settings(port=True, apiKey=123, displayBedTemp="perhaps"))
        assert s.port is None
        assert s.api_key is None
        assert s.toggles.bed_temp is False
        assert s.is_valid

    def test_string_toggles(self):
        s = MonitorSettings.from_raw({"displayLayerInfo": "true", "displayPrintStatus": "off"})
        assert s.toggles.layer_info is True
        assert s.toggles.print_status is False

    def test_whole_float_port_has_no_decimal(self):
        assert MonitorSettings.from_raw({"port": 7125.0}).port == "7125"

    def test_empty_port_is_absent(self):
        assert MonitorSettings.from_raw({"port": ""}).port is None

    def test_unknown_keys_ignored(self):
        s = MonitorSettings.from_raw(make_settings(somethingElse={"a": 1}))
        assert s.is_valid


class TestRequireValid:

    def test_raises_invalid_settings_error(self):
        with pytest.raises(InvalidSettingsError) as info:
            MonitorSettings.from_raw({"baseUrl": "printer.local"}).require_valid()
        assert info.value.key_title == "Settings\nInvalid"

    def test_valid_settings_pass(self):
        MonitorSettings.from_raw(make_settings()).require_valid()


def test_malformed_api_key_value_not_logged(caplog):
    caplog.set_level(logging.DEBUG)
    s = MonitorSettings.from_raw(make_settings(apiKey=["SECRET-KEY"]))
    assert s.api_key is None
    assert "apiKey" in caplog.text
    assert "SECRET-KEY" not in caplog.text
