from typing import Protocol


class TelemetrySink(Protocol):
    def publish(self, name: str, value: float) -> None: ...
    def close(self) -> None: ...
