# seplos_bms/model/sensors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

MAX_CELLS = 16
MAX_TEMPERATURES = 6


@dataclass(frozen=True)
class SensorDef:
    name: str
    display_name: str
    unit: str
    accuracy_decimals: int

    def format(self, value: float) -> str:
        text = f"{float(value):.{self.accuracy_decimals}f}"
        return f"{text} {self.unit}" if self.unit else text


def _build_catalogue() -> Dict[str, SensorDef]:
    defs: List[SensorDef] = [
        SensorDef("min_cell_voltage", "Minimum Cell Voltage", "V", 3),
        SensorDef("max_cell_voltage", "Maximum Cell Voltage", "V", 3),
        SensorDef("min_voltage_cell", "Minimum Voltage Cell", "", 0),
        SensorDef("max_voltage_cell", "Maximum Voltage Cell", "", 0),
        SensorDef("delta_cell_voltage", "Delta Cell Voltage", "V", 3),
        SensorDef("average_cell_voltage", "Average Cell Voltage", "V", 3),
    ]
    defs += [SensorDef(f"cell_voltage_{i}", f"Cell Voltage {i}", "V", 3) for i in range(1, MAX_CELLS + 1)]
    defs += [SensorDef(f"temperature_{i}", f"Temperature {i}", "°C", 1) for i in range(1, MAX_TEMPERATURES + 1)]
    defs += [
        SensorDef("total_voltage", "Total Voltage", "V", 2),
        SensorDef("current", "Current", "A", 2),
        SensorDef("power", "Power", "W", 2),
        SensorDef("charging_power", "Charging Power", "W", 2),
        SensorDef("discharging_power", "Discharging Power", "W", 2),
        SensorDef("charging_cycles", "Charging Cycles", "", 0),
        SensorDef("state_of_charge", "State of Charge", "%", 1),
        SensorDef("residual_capacity", "Residual Capacity", "Ah", 2),
        SensorDef("battery_capacity", "Battery Capacity", "Ah", 2),
        SensorDef("rated_capacity", "Rated Capacity", "Ah", 2),
        SensorDef("state_of_health", "State of Health", "%", 1),
        SensorDef("port_voltage", "Port Voltage", "V", 2),
    ]
    return {d.name: d for d in defs}


SENSORS: Dict[str, SensorDef] = _build_catalogue()


def get_sensor(name: str) -> Optional[SensorDef]:
    return SENSORS.get(name)


def unknown_sensor_names(names: Iterable[str]) -> List[str]:
    return [n for n in names if n not in SENSORS]


def describe_sensors(registered: Optional[Iterable[str]] = None) -> List[str]:
    """
    Render the sensor configuration dump, one line per sensor.

    registered: names that are published; None means all of them.
    """
    active = set(SENSORS) if registered is None else set(registered)
    lines = []
    for d in SENSORS.values():
        state = "on" if d.name in active else "off"
        unit = d.unit or "-"
        lines.append(f"{d.display_name:<22} {d.name:<22} unit={unit:<3} decimals={d.accuracy_decimals} [{state}]")
    return lines
