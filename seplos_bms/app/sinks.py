# seplos_bms/app/sinks.py
from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, Iterable, Optional, Sequence, TextIO

from seplos_bms.interfaces.telemetry_sink import TelemetrySink
from seplos_bms.model.sensors import get_sensor
from seplos_bms.model.telemetry import Telemetry

_log = logging.getLogger(__name__)


def publish_telemetry(
    telemetry: Telemetry,
    sinks: Sequence[TelemetrySink],
    *,
    logger: Optional[logging.Logger] = None,
) -> int:
    """
    Hand every present field to every sink, one publish() call per field.

    Absent fields are not sent, so sinks keep their previous value for them.
    A failing sink is logged and does not stop the others.
    Returns the number of fields published.
    """
    log = logger or _log
    count = 0
    for name, value in telemetry.iter_sensor_values():
        for sink in sinks:
            try:
                sink.publish(name, value)
            except Exception:
                log.exception("SINK_PUBLISH_ERROR sensor=%s", name)
        count += 1
    return count


class LatestValueSink(TelemetrySink):
    """Keeps the last published value of every sensor."""

    def __init__(self):
        self._values: Dict[str, float] = {}
        self._lock = Lock()

    def publish(self, name: str, value: float) -> None:
        with self._lock:
            self._values[name] = value

    def get(self, name: str) -> Optional[float]:
        with self._lock:
            return self._values.get(name)

    def snapshot(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._values)

    def close(self) -> None:
        return None


class FilteredSink(TelemetrySink):
    """Forwards only registered sensors to the wrapped sink."""

    def __init__(self, inner: TelemetrySink, registered: Iterable[str]):
        self._inner = inner
        self._registered = frozenset(registered)

    def publish(self, name: str, value: float) -> None:
        if name in self._registered:
            self._inner.publish(name, value)

    def close(self) -> None:
        self._inner.close()


class LoggingSink(TelemetrySink):
    """Logs each value with its display precision."""

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self._log = logger or _log
        self._level = level

    def publish(self, name: str, value: float) -> None:
        sdef = get_sensor(name)
        text = sdef.format(value) if sdef else repr(value)
        self._log.log(self._level, "SENSOR %s=%s", name, text)

    def close(self) -> None:
        return None


class PrintSink(TelemetrySink):
    """Print values to a stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def publish(self, name: str, value: float) -> None:
        sdef = get_sensor(name)
        label = sdef.display_name if sdef else name
        text = sdef.format(value) if sdef else repr(value)
        print(f"{label}: {text}", file=self._stream)

    def close(self) -> None:
        return None
