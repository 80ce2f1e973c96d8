# seplos_bms/protocol/codec.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
import struct


@dataclass(frozen=True)
class PrimitiveCodec:
    fmt: str  # big-endian struct format
    size: int


# Seplos frames are big-endian on the wire.
PRIMITIVES: Dict[str, PrimitiveCodec] = {
    "uint8":  PrimitiveCodec(fmt=">B", size=1),
    "uint16": PrimitiveCodec(fmt=">H", size=2),
    "int16":  PrimitiveCodec(fmt=">h", size=2),
}


def primitive_size(encode: str) -> int:
    enc = encode.lower()
    if enc not in PRIMITIVES:
        raise NotImplementedError(f"Unknown encode type '{encode}'")
    return PRIMITIVES[enc].size


def in_bounds(data: bytes, offset: int, size: int) -> bool:
    return offset >= 0 and offset + size <= len(data)


def read_primitive(data: bytes, offset: int, encode: str = "uint16") -> Optional[int]:
    """
    Read one big-endian value at *offset*.

    Returns None when the value's byte range is not fully inside *data*.
    """
    size = primitive_size(encode)
    if not in_bounds(data, offset, size):
        return None
    return struct.unpack_from(PRIMITIVES[encode.lower()].fmt, data, offset)[0]


def read_scaled(data: bytes, offset: int, coeff: float, encode: str = "uint16") -> Optional[float]:
    raw = read_primitive(data, offset, encode)
    if raw is None:
        return None
    return raw * coeff
