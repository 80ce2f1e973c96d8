# seplos_bms/app/monitor.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from seplos_bms.app.config import MonitorConfig
from seplos_bms.app.sinks import FilteredSink, publish_telemetry
from seplos_bms.core.errors import DeviceDisconnectedError
from seplos_bms.interfaces import TelemetrySink
from seplos_bms.model.sensors import describe_sensors
from seplos_bms.model.telemetry import Telemetry
from seplos_bms.protocol.decoder import FrameDecoder
from seplos_bms.protocol.errors import FrameRejected, LinkFrameError
from seplos_bms.protocol.link import EOI, MAX_LINK_FRAME_BYTES, LinkFrameAssembler, parse_link_frame
from seplos_bms.transport.base import Transport
from seplos_bms.transport.errors import TransportIOError


@dataclass
class MonitorStats:
    frames_seen: int = 0
    frames_decoded: int = 0
    frames_rejected: int = 0
    link_errors: int = 0
    last_error: Optional[str] = None


class TelemetryMonitor:
    """
    Passive telemetry listener.

    Takes complete frames (binary bodies, or ASCII link frames read from a
    transport), decodes them and publishes the present fields to every sink.
    Only sensors registered in the config reach the sinks.
    """

    def __init__(self, config: MonitorConfig, *, logger: Optional[logging.Logger] = None):
        self._config = config
        self._log = logger or logging.getLogger(__name__)
        self._decoder = FrameDecoder(config.cell_count_override)
        self._registered = config.registered_sensors()
        self._sinks: List[TelemetrySink] = []
        self._link = LinkFrameAssembler(logger=self._log)
        self._stop = threading.Event()
        self.stats = MonitorStats()

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def decoder(self) -> FrameDecoder:
        return self._decoder

    def add_sink(self, sink: TelemetrySink) -> None:
        self._sinks.append(FilteredSink(sink, self._registered))

    def dump_config(self) -> None:
        self._log.info("SeplosBms: cell_count_override=%d", self._config.cell_count_override)
        for line in describe_sensors(self._registered):
            self._log.info("  %s", line)

    # ------------------------------------------------------------------
    # Frame handling
    # ------------------------------------------------------------------
    def process_frame(self, buffer: bytes) -> Optional[Telemetry]:
        """Decode a binary frame and publish it. Rejected frames publish nothing."""
        self.stats.frames_seen += 1
        try:
            telemetry = self._decoder.decode(buffer)
        except FrameRejected as e:
            self.stats.frames_rejected += 1
            self.stats.last_error = str(e)
            self._log.warning("FRAME_REJECTED reason=%s len=%d: %s", e.reason, len(buffer), e)
            return None

        self.stats.frames_decoded += 1
        published = publish_telemetry(telemetry, self._sinks, logger=self._log)
        self._log.debug("TELEMETRY_PUBLISHED fields=%d", published)
        return telemetry

    def process_link_frame(self, raw: bytes) -> Optional[Telemetry]:
        """Strip ASCII link framing, then decode and publish."""
        try:
            body = parse_link_frame(raw)
        except LinkFrameError as e:
            self.stats.link_errors += 1
            self.stats.last_error = str(e)
            self._log.warning("LINK_FRAME_INVALID reason=%s len=%d", e.reason, len(raw))
            return None
        return self.process_frame(body)

    # ------------------------------------------------------------------
    # Transport loop
    # ------------------------------------------------------------------
    def run(self, transport: Transport, *, max_frames: Optional[int] = None) -> MonitorStats:
        """
        Read link frames from an open transport until stop() or max_frames.

        Reads may split a frame or carry several; chunks are reassembled
        before decoding, and a partial frame is kept for the next call.

        Raises:
            DeviceDisconnectedError: the transport failed mid-read.
        """
        self._stop.clear()
        handled = 0
        while not self._stop.is_set():
            try:
                raw = transport.read_until(bytes([EOI]), MAX_LINK_FRAME_BYTES)
            except TransportIOError as e:
                raise DeviceDisconnectedError(str(e), hint="Check the RS-485 adapter and cabling.") from None

            if not raw:
                continue  # read timeout, bus idle

            self._link.feed(raw)
            while True:
                frame = self._link.get_frame()
                if frame is None:
                    break
                self.process_link_frame(frame)
                handled += 1
                if max_frames is not None and handled >= max_frames:
                    return self.stats

        return self.stats

    def stop(self) -> None:
        self._stop.set()

    def close(self) -> None:
        self.stop()
        for s in self._sinks:
            try:
                s.close()
            except Exception:
                self._log.exception("SINK_CLOSE_ERROR")
        self._sinks.clear()
