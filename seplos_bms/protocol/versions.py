# seplos_bms/protocol/versions.py
from __future__ import annotations

from dataclasses import dataclass, fields
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Tuple

from .errors import UnknownProtocolVersion


class ProtocolVersion(IntEnum):
    """Wire layout tag carried in byte 0 of every telemetry frame."""

    V21 = 0x21
    V25 = 0x25

    @property
    def label(self) -> str:
        return f"v{self.value >> 4}.{self.value & 0x0F}"


@dataclass(frozen=True)
class FieldLayout:
    """
    Zero-based byte offsets of every logical field for one protocol version.

    Offsets carry no length guarantee: each read is checked against the
    actual buffer at decode time.
    """
    cell_count: int
    cell_voltages_start: int
    temp_sensor_count: int
    temp_sensors_start: int
    current: int
    total_voltage: int
    residual_capacity: int
    battery_capacity: int
    state_of_charge: int
    rated_capacity: int
    cycle_count: int
    state_of_health: int
    port_voltage: int
    total_voltage_scale: float  # V per LSB, differs between versions

    def offsets(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "total_voltage_scale"}


_LAYOUTS: Mapping[ProtocolVersion, FieldLayout] = MappingProxyType({
    ProtocolVersion.V21: FieldLayout(
        cell_count=7,
        cell_voltages_start=8,
        temp_sensor_count=38,
        temp_sensors_start=39,
        current=53,
        total_voltage=55,
        residual_capacity=57,
        battery_capacity=61,
        state_of_charge=63,
        rated_capacity=65,
        cycle_count=67,
        state_of_health=69,
        port_voltage=71,
        total_voltage_scale=0.01,
    ),
    ProtocolVersion.V25: FieldLayout(
        cell_count=8,
        cell_voltages_start=9,
        temp_sensor_count=39,
        temp_sensors_start=40,
        current=52,
        total_voltage=54,
        residual_capacity=56,
        battery_capacity=60,
        state_of_charge=62,
        rated_capacity=64,
        cycle_count=66,
        state_of_health=68,
        port_voltage=70,
        total_voltage_scale=0.001,
    ),
})


def is_known_version(tag: int) -> bool:
    try:
        return ProtocolVersion(int(tag)) in _LAYOUTS
    except ValueError:
        return False


def known_versions() -> Tuple[ProtocolVersion, ...]:
    return tuple(sorted(_LAYOUTS))


def layout_for(version: int) -> FieldLayout:
    """Return the layout registered for *version* or raise UnknownProtocolVersion."""
    try:
        return _LAYOUTS[ProtocolVersion(int(version))]
    except (ValueError, KeyError):
        raise UnknownProtocolVersion(int(version)) from None
