from __future__ import annotations

import binascii
import struct
from typing import Dict, Optional, Sequence

import pytest

from seplos_bms.protocol.link import frame_checksum
from seplos_bms.protocol.versions import layout_for


def build_frame(
    version: int = 0x21,
    *,
    cells_raw: Sequence[int] = (),
    cell_count: Optional[int] = None,
    temps_raw: Sequence[int] = (),
    temp_count: Optional[int] = None,
    current_raw: int = 0,
    total_voltage_raw: int = 0,
    fields_raw: Optional[Dict[str, int]] = None,
    length: Optional[int] = None,
) -> bytes:
    """
    Build a binary frame body with every field at its registered offset.

    length truncates (or zero-pads) the result; default is the full frame.
    fields_raw keys are layout attribute names (residual_capacity, cycle_count, ...).
    """
    layout = layout_for(version)
    full = layout.port_voltage + 2
    buf = bytearray(max(full, length or 0))
    buf[0] = version

    buf[layout.cell_count] = len(cells_raw) if cell_count is None else cell_count
    for i, raw in enumerate(cells_raw):
        struct.pack_into(">H", buf, layout.cell_voltages_start + 2 * i, raw)

    buf[layout.temp_sensor_count] = len(temps_raw) if temp_count is None else temp_count
    for i, raw in enumerate(temps_raw):
        struct.pack_into(">H", buf, layout.temp_sensors_start + 2 * i, raw)

    struct.pack_into(">h", buf, layout.current, current_raw)
    struct.pack_into(">H", buf, layout.total_voltage, total_voltage_raw)

    for name, raw in (fields_raw or {}).items():
        struct.pack_into(">H", buf, getattr(layout, name), raw)

    if length is not None:
        return bytes(buf[:length])
    return bytes(buf[:full])


def wrap_link(payload: bytes) -> bytes:
    body = binascii.hexlify(payload).upper()
    return b"~" + body + f"{frame_checksum(body):04X}".encode("ascii") + b"\r"


@pytest.fixture
def make_frame():
    return build_frame


@pytest.fixture
def link_frame():
    return wrap_link
