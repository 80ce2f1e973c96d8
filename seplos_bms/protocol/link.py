# seplos_bms/protocol/link.py
"""
Seplos ASCII link layer (response direction only).

A frame on the bus looks like:

    ~ <body as ASCII hex> <CHKSUM, 4 ASCII hex digits> \\r

The body decodes to VER ADR CID1 RTN LENGTH(2) INFO..., so byte 0 of the
stripped binary body is the protocol-version tag the decoder dispatches on.
"""

from __future__ import annotations

import binascii
import logging
from typing import Optional

from .errors import LinkFrameError

SOI = 0x7E  # '~'
EOI = 0x0D  # '\r'
CHECKSUM_DIGITS = 4

# SOI + at least one hex byte + checksum + EOI
MIN_LINK_FRAME_LEN = 1 + 2 + CHECKSUM_DIGITS + 1

# Longest ASCII frame buffered while waiting for EOI.
MAX_LINK_FRAME_BYTES = 512


def frame_checksum(body: bytes) -> int:
    """Checksum over the ASCII hex body: sum mod 0xFFFF, inverted, plus one."""
    checksum = sum(body) % 0xFFFF
    checksum ^= 0xFFFF
    checksum += 1
    return checksum & 0xFFFF


def parse_link_frame(raw: bytes, *, verify_checksum: bool = True) -> bytes:
    """
    Strip link framing from one ASCII frame and return the binary body.

    Leading noise before SOI and a missing EOI are tolerated; everything
    else raises LinkFrameError.
    """
    raw = bytes(raw)
    start = raw.find(bytes([SOI]))
    if start < 0:
        raise LinkFrameError("no_soi", raw)

    frame = raw[start:].rstrip(b"\r\n")
    if len(frame) + 1 < MIN_LINK_FRAME_LEN:
        raise LinkFrameError("too_short", raw)

    body = frame[1:-CHECKSUM_DIGITS]
    chk_text = frame[-CHECKSUM_DIGITS:]

    if len(body) % 2:
        raise LinkFrameError("odd_length", raw)

    try:
        received = int.from_bytes(binascii.unhexlify(chk_text), "big")
        payload = binascii.unhexlify(body)
    except (ValueError, binascii.Error):
        raise LinkFrameError("not_hex", raw) from None

    if verify_checksum:
        expected = frame_checksum(body)
        if received != expected:
            raise LinkFrameError(f"checksum expected=0x{expected:04X} got=0x{received:04X}", raw)

    return payload


class LinkFrameAssembler:
    """
    Reassembles ASCII link frames from arbitrary chunks read off the bus.

    A frame may arrive split across reads, or several frames in one read.
    Bytes before SOI are dropped. A partial frame that grows past
    max_frame_bytes without an EOI is discarded.
    """

    def __init__(self, max_frame_bytes: int = MAX_LINK_FRAME_BYTES, logger: Optional[logging.Logger] = None):
        self.max_frame_bytes = max_frame_bytes
        self.buffer = bytearray()
        self._log = logger or logging.getLogger(__name__)

    def feed(self, data: bytes) -> None:
        """Append raw bytes to the receive buffer."""
        self.buffer.extend(data)
        self._log.debug("LINK_FED bytes=%d buffer_len=%d", len(data), len(self.buffer))

    def get_frame(self) -> Optional[bytes]:
        """Return the next complete frame (SOI..EOI inclusive), if buffered."""
        while True:
            start = self.buffer.find(SOI)
            if start < 0:
                if self.buffer:
                    self._log.debug("LINK_NOISE_DROPPED bytes=%d", len(self.buffer))
                    self.buffer.clear()
                return None
            if start > 0:
                self._log.debug("LINK_NOISE_DROPPED bytes=%d", start)
                del self.buffer[:start]

            end = self.buffer.find(EOI)
            if end < 0:
                if len(self.buffer) <= self.max_frame_bytes:
                    return None  # wait for more bytes
                self._log.warning("LINK_FRAME_OVERFLOW buffer_len=%d max=%d", len(self.buffer), self.max_frame_bytes)
                resync = self.buffer.rfind(SOI, 1)
                if resync > 0:
                    del self.buffer[:resync]
                else:
                    self.buffer.clear()
                continue

            # A frame cut short by a newer SOI is abandoned in favour of the newer one.
            start = self.buffer.rfind(SOI, 0, end)
            frame = bytes(self.buffer[start:end + 1])
            del self.buffer[:end + 1]
            return frame
