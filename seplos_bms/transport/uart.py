# seplos_bms/transport/uart.py
from __future__ import annotations

from typing import Optional

import serial
from serial import SerialException

from .base import Transport
from .errors import TransportIOError, TransportOpenError

DEFAULT_BAUDRATE = 19200


class UARTTransport(Transport):
    """
    RS-485 / UART transport implemented via pyserial (8N1).

    read(n) attempts to read up to n bytes and may return fewer due to timeout.
    """

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUDRATE, timeout: float = 0.1):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.ser: Optional[serial.Serial] = None

    def open(self) -> None:
        try:
            self.ser = serial.Serial(
                self.port,
                baudrate=self.baudrate,
                timeout=self.timeout,
            )
            self.ser.reset_input_buffer()
        except SerialException as e:
            self.ser = None
            raise TransportOpenError(str(e)) from None

    def close(self) -> None:
        if self.ser is not None:
            try:
                self.ser.close()
            finally:
                self.ser = None

    def is_open(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def read(self, n: int) -> bytes:
        if self.ser is None:
            raise TransportIOError("read while transport not open")

        try:
            buf = b""
            while len(buf) < n:
                chunk = self.ser.read(n - len(buf))
                if not chunk:
                    # timeout reached → return whatever is collected
                    break
                buf += chunk
            return buf
        except SerialException as e:
            self.ser = None
            raise TransportIOError(f"UART read failed: {e}") from None

    def read_until(self, terminator: bytes, max_bytes: int) -> bytes:
        if self.ser is None:
            raise TransportIOError("read while transport not open")

        try:
            return self.ser.read_until(terminator, max_bytes)
        except SerialException as e:
            self.ser = None
            raise TransportIOError(f"UART read failed: {e}") from None
