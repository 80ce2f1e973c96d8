# seplos_bms/protocol/decoder.py
"""
Telemetry frame decoder.

Walks a raw frame according to the layout registered for its version byte.
Decoding is best-effort: a field whose bytes are not inside the frame is left
out of the result, and indexed families (cells, temperatures) stop at the
first entry that does not fit. Only a frame that is too short or carries an
unknown version is rejected as a whole.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from seplos_bms.model.sensors import MAX_CELLS, MAX_TEMPERATURES
from seplos_bms.model.telemetry import Telemetry

from .codec import read_primitive, read_scaled
from .errors import FrameTooShort
from .versions import FieldLayout, ProtocolVersion, layout_for

MIN_FRAME_LEN = 8

CELL_VOLTAGE_LSB = 0.001     # V
TEMPERATURE_LSB = 0.1        # K
TEMPERATURE_OFFSET_RAW = 2731  # 273.1 K in decikelvin
CURRENT_LSB = 0.01           # A

# (telemetry field, layout offset attribute, coefficient)
CAPACITY_FIELDS = (
    ("residual_capacity", "residual_capacity", 0.01),
    ("battery_capacity", "battery_capacity", 0.01),
    ("state_of_charge", "state_of_charge", 0.1),
    ("rated_capacity", "rated_capacity", 0.01),
    ("charging_cycles", "cycle_count", 1.0),
    ("state_of_health", "state_of_health", 0.1),
    ("port_voltage", "port_voltage", 0.01),
)

_log = logging.getLogger(__name__)


class FrameDecoder:
    """
    Stateless decoder bound to one cell-count override.

    cell_count_override: when non-zero, replaces the count reported by the
    frame. Fixed for the lifetime of the instance.
    """

    def __init__(self, cell_count_override: int = 0, *, logger: Optional[logging.Logger] = None):
        override = int(cell_count_override or 0)
        if override < 0:
            raise ValueError(f"cell_count_override must be >= 0, got {override}")
        self.cell_count_override = override
        self._log = logger or _log

    def decode(self, raw_frame: bytes) -> Telemetry:
        """
        Decode one frame.

        Raises:
            FrameTooShort: fewer than MIN_FRAME_LEN bytes.
            UnknownProtocolVersion: byte 0 is not a registered version.
        """
        data = bytes(raw_frame)

        if len(data) < MIN_FRAME_LEN:
            raise FrameTooShort(len(data), MIN_FRAME_LEN)

        layout = layout_for(data[0])
        version = ProtocolVersion(data[0])

        self._log.info("TELEMETRY_FRAME version=%s len=%d", version.label, len(data))
        if self._log.isEnabledFor(logging.DEBUG):
            self._log.debug("FRAME_HEX %s", data.hex(" ").upper())

        out: Dict[str, Any] = {"protocol_version": int(version)}

        cells = self._resolve_cell_count(data, layout)
        out["cell_count"] = cells
        self._decode_cells(data, layout, cells, out)

        # The remainder hangs off the temperature sensor count.
        temp_count = read_primitive(data, layout.temp_sensor_count, "uint8")
        if temp_count is None:
            self._log.debug("TEMP_COUNT_OUT_OF_RANGE offset=%d len=%d", layout.temp_sensor_count, len(data))
            return Telemetry(**out)

        out["temperature_sensor_count"] = temp_count
        self._decode_temperatures(data, layout, temp_count, out)
        self._decode_power(data, layout, out)
        self._decode_capacities(data, layout, out)

        return Telemetry(**out)

    # ------------------------------------------------------------------
    # Field families
    # ------------------------------------------------------------------
    def _resolve_cell_count(self, data: bytes, layout: FieldLayout) -> int:
        if self.cell_count_override:
            self._log.debug("CELL_COUNT override=%d", self.cell_count_override)
            return self.cell_count_override

        reported = read_primitive(data, layout.cell_count, "uint8")
        if reported is None:
            self._log.debug("CELL_COUNT_OUT_OF_RANGE offset=%d len=%d", layout.cell_count, len(data))
            return 0
        self._log.debug("CELL_COUNT reported=%d", reported)
        return reported

    def _decode_cells(self, data: bytes, layout: FieldLayout, cells: int, out: Dict[str, Any]) -> None:
        voltages: List[float] = []
        total = 0.0
        min_v = max_v = 0.0
        min_cell = max_cell = 0

        for i in range(min(MAX_CELLS, cells)):
            v = read_scaled(data, layout.cell_voltages_start + 2 * i, CELL_VOLTAGE_LSB)
            if v is None:
                break

            total += v
            # strict comparisons: first occurrence wins ties
            if not voltages or v < min_v:
                min_v, min_cell = v, i + 1
            if not voltages or v > max_v:
                max_v, max_cell = v, i + 1
            voltages.append(v)

        out["cell_voltages"] = tuple(voltages)

        # A zero count decodes no cell, so no division happens below.
        if not voltages:
            self._log.debug("CELL_AGGREGATES_SKIPPED cells=%d", cells)
            return

        out["min_cell_voltage"] = min_v
        out["max_cell_voltage"] = max_v
        out["min_voltage_cell"] = min_cell
        out["max_voltage_cell"] = max_cell
        out["delta_cell_voltage"] = max_v - min_v
        # Divides by the resolved count, not by the number decoded.
        out["average_cell_voltage"] = total / cells

        self._log.debug(
            "CELLS decoded=%d min=%.3f@%d max=%.3f@%d",
            len(voltages), min_v, min_cell, max_v, max_cell,
        )

    def _decode_temperatures(self, data: bytes, layout: FieldLayout, count: int, out: Dict[str, Any]) -> None:
        temps: List[float] = []
        for i in range(min(MAX_TEMPERATURES, count)):
            raw = read_primitive(data, layout.temp_sensors_start + 2 * i, "uint16")
            if raw is None:
                break
            temps.append((raw - TEMPERATURE_OFFSET_RAW) * TEMPERATURE_LSB)
        out["temperatures"] = tuple(temps)
        self._log.debug("TEMPERATURES reported=%d decoded=%d", count, len(temps))

    def _decode_power(self, data: bytes, layout: FieldLayout, out: Dict[str, Any]) -> None:
        current = read_scaled(data, layout.current, CURRENT_LSB, "int16")
        total_voltage = read_scaled(data, layout.total_voltage, layout.total_voltage_scale, "uint16")

        if current is not None:
            out["current"] = current
        if total_voltage is not None:
            out["total_voltage"] = total_voltage

        if current is None or total_voltage is None:
            return

        power = total_voltage * current
        out["power"] = power
        out["charging_power"] = max(0.0, power)
        out["discharging_power"] = abs(min(0.0, power))

    def _decode_capacities(self, data: bytes, layout: FieldLayout, out: Dict[str, Any]) -> None:
        for name, attr, coeff in CAPACITY_FIELDS:
            offset = getattr(layout, attr)
            raw = read_primitive(data, offset, "uint16")
            if raw is None:
                continue
            out[name] = raw * coeff
            self._log.debug("FIELD %s offset=%d raw=%d value=%s", name, offset, raw, out[name])


def decode(raw_frame: bytes, cell_count_override: int = 0) -> Telemetry:
    return FrameDecoder(cell_count_override).decode(raw_frame)
