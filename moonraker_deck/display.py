"""Reduce a printer status snapshot to key title lines and an icon."""
from __future__ import annotations

import enum
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from .const import ACTIVE_STATES, ICON_DIR, TITLE_NO_DATA
from .settings import DisplayToggles
from .snapshot import HeaterReading, Number, PrinterSnapshot

_LOGGER = logging.getLogger(__name__)

# Best-effort only; print_stats.info is authoritative when present
LAYER_RE = re.compile(r"Layer\s*(\d+)\s*/\s*(\d+)", re.IGNORECASE)


class KeyIcon(enum.Enum):
    STANDBY = "icon_printer_standby.png"
    PRINTING = "icon_printer_printing.png"
    PAUSED = "icon_printer_paused.png"
    COMPLETE = "icon_printer_complete.png"
    ERROR = "icon_printer_error.png"

    @property
    def path(self) -> str:
        return f"{ICON_DIR}/{self.value}"


STATE_ICONS = {
    "standby": KeyIcon.STANDBY,
    "idle": KeyIcon.STANDBY,  # Klipper reports idle for standby on some setups
    "printing": KeyIcon.PRINTING,
    "paused": KeyIcon.PAUSED,
    "complete": KeyIcon.COMPLETE,
    "error": KeyIcon.ERROR,
}


@dataclass(frozen=True)
class KeyDisplay:
    """What the key should show.

    ``icon`` of None reverts to the manifest icon; ``keep_icon`` leaves the
    current image untouched (used for error and settings placeholders).
    """

    lines: tuple[str, ...]
    icon: Optional[KeyIcon] = None
    keep_icon: bool = False

    @property
    def title(self) -> str:
        return "\n".join(self.lines)

    @classmethod
    def placeholder(cls, title: str) -> "KeyDisplay":
        return cls(tuple(title.split("\n")), None, keep_icon=True)


def _round(value: Number) -> int:
    # half away from zero, unlike the builtin round()
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _count(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _heater_line(prefix: str, reading: HeaterReading) -> str:
    return f"{prefix}:{_round(reading.temperature)}/{_round(reading.target)}°"


def state_label(state: Optional[str]) -> str:
    if not state:
        return "Unknown"
    if state == "standby":
        return "Idle"
    return state[:1].upper() + state[1:]


def _layer_line(snapshot: PrinterSnapshot) -> Optional[str]:
    if snapshot.layers is not None:
        return f"L:{_count(snapshot.layers.current)}/{_count(snapshot.layers.total)}"
    message = snapshot.message
    if message and "layer" in message.lower():
        m = LAYER_RE.search(message)
        if m:
            return f"L:{m.group(1)}/{m.group(2)}"
    return None


def render(status: Any, toggles: DisplayToggles) -> KeyDisplay:
    """Title lines + icon for a (possibly partial) ``result.status`` payload.

    Never raises and never returns an empty line list.
    """
    snapshot = status if isinstance(status, PrinterSnapshot) else PrinterSnapshot.from_status(status)
    state = snapshot.state
    label = state_label(state)
    active = state in ACTIVE_STATES
    lines: list[str] = []

    if toggles.print_status and state:
        lines.append(label)
    if toggles.bed_temp and snapshot.heater_bed:
        lines.append(_heater_line("B", snapshot.heater_bed))
    if toggles.hotend_temp and snapshot.extruder:
        lines.append(_heater_line("H", snapshot.extruder))
    if toggles.print_progress and snapshot.progress is not None and active:
        percent = snapshot.progress * 100
        if math.isfinite(percent):
            lines.append(f"{_round(percent)}%")
    if toggles.layer_info and active:
        layer = _layer_line(snapshot)
        if layer:
            lines.append(layer)

    if not lines:
        lines.append(label if state else TITLE_NO_DATA)

    icon = STATE_ICONS.get(state or "")
    if icon is None:
        _LOGGER.debug("No specific icon for print state: %s. Reverting to default.", state)
    return KeyDisplay(tuple(lines), icon)
