from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Transport(ABC):
    """
    Abstract receive-side transport (UART, TCP bridge, capture replay, ...).

    Contract:
      - open()/close() manage the underlying connection.
      - read(n) returns 0..n bytes. It may return fewer than n bytes due to timeouts
        and returns b"" when no data is available.
      - read_until(terminator, max_bytes) returns bytes up to and including the
        terminator, or whatever arrived before the timeout (possibly b"").
    """

    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def read(self, n: int) -> bytes: ...

    @abstractmethod
    def read_until(self, terminator: bytes, max_bytes: int) -> bytes: ...

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()
