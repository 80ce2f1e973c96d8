# seplos_bms/model/telemetry.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

# Scalar fields in publish order. Indexed families (cells, temperatures) are
# flattened separately.
_CELL_AGGREGATES = (
    "min_cell_voltage",
    "max_cell_voltage",
    "min_voltage_cell",
    "max_voltage_cell",
    "delta_cell_voltage",
    "average_cell_voltage",
)

_PACK_SCALARS = (
    "current",
    "total_voltage",
    "power",
    "charging_power",
    "discharging_power",
    "residual_capacity",
    "battery_capacity",
    "state_of_charge",
    "rated_capacity",
    "charging_cycles",
    "state_of_health",
    "port_voltage",
)


@dataclass(frozen=True)
class Telemetry:
    """
    One decoded telemetry frame.

    Every measurement is optional: None means its bytes were not inside the
    frame (or, for derived values, that an input was missing). Cell and
    temperature tuples hold only the entries that were actually decoded.

    Context (not published as sensors):
      protocol_version: version tag of the frame
      cell_count: resolved count (override or reported), before the 16 cap
      temperature_sensor_count: reported count, None if not reached
    """
    protocol_version: int
    cell_count: int = 0
    temperature_sensor_count: Optional[int] = None

    cell_voltages: Tuple[float, ...] = field(default_factory=tuple)
    min_cell_voltage: Optional[float] = None
    max_cell_voltage: Optional[float] = None
    min_voltage_cell: Optional[int] = None
    max_voltage_cell: Optional[int] = None
    delta_cell_voltage: Optional[float] = None
    average_cell_voltage: Optional[float] = None

    temperatures: Tuple[float, ...] = field(default_factory=tuple)

    current: Optional[float] = None
    total_voltage: Optional[float] = None
    power: Optional[float] = None
    charging_power: Optional[float] = None
    discharging_power: Optional[float] = None

    residual_capacity: Optional[float] = None
    battery_capacity: Optional[float] = None
    state_of_charge: Optional[float] = None
    rated_capacity: Optional[float] = None
    charging_cycles: Optional[float] = None
    state_of_health: Optional[float] = None
    port_voltage: Optional[float] = None

    def iter_sensor_values(self) -> Iterator[Tuple[str, float]]:
        """Yield (sensor_name, value) for every present measurement, in publish order."""
        for i, v in enumerate(self.cell_voltages, start=1):
            yield f"cell_voltage_{i}", v
        for name in _CELL_AGGREGATES:
            v = getattr(self, name)
            if v is not None:
                yield name, v
        for i, v in enumerate(self.temperatures, start=1):
            yield f"temperature_{i}", v
        for name in _PACK_SCALARS:
            v = getattr(self, name)
            if v is not None:
                yield name, v

    def as_dict(self) -> Dict[str, float]:
        return dict(self.iter_sensor_values())
