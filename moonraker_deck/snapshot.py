"""Typed view over the untrusted ``result.status`` payload.

Every sub-record is optional and parsed independently; anything of the
wrong shape reads as absent instead of raising.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

Number = Union[int, float]


def _num(x) -> Optional[Number]:
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return None
    if isinstance(x, float) and not math.isfinite(x):
        return None
    return x


def _record(status: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    value = status.get(key)
    return value if isinstance(value, Mapping) else None


@dataclass(frozen=True)
class HeaterReading:
    temperature: Number
    target: Number

    @classmethod
    def parse(cls, record: Optional[Mapping[str, Any]]) -> Optional["HeaterReading"]:
        if record is None:
            return None
        temperature, target = _num(record.get("temperature")), _num(record.get("target"))
        if temperature is None or target is None:
            return None
        return cls(temperature, target)


@dataclass(frozen=True)
class LayerInfo:
    current: Number
    total: Number


@dataclass(frozen=True)
class PrinterSnapshot:
    state: Optional[str] = None
    layers: Optional[LayerInfo] = None
    heater_bed: Optional[HeaterReading] = None
    extruder: Optional[HeaterReading] = None
    progress: Optional[Number] = None
    message: Optional[str] = None

    @classmethod
    def from_status(cls, status: Any) -> "PrinterSnapshot":
        if not isinstance(status, Mapping):
            return cls()

        stats = _record(status, "print_stats") or {}
        state = stats.get("state")

        layers = None
        info = stats.get("info")
        if isinstance(info, Mapping):
            current, total = _num(info.get("current_layer")), _num(info.get("total_layer"))
            if current is not None and total is not None:
                layers = LayerInfo(current, total)

        sdcard = _record(status, "virtual_sdcard") or {}
        display = _record(status, "display_status") or {}
        message = display.get("message")

        return cls(
            state=state.lower() if isinstance(state, str) and state else None,
            layers=layers,
            heater_bed=HeaterReading.parse(_record(status, "heater_bed")),
            extruder=HeaterReading.parse(_record(status, "extruder")),
            progress=_num(sdcard.get("progress")),
            message=message if isinstance(message, str) and message else None,
        )
