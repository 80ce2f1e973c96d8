# seplos_bms/cli/commands.py
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from seplos_bms.app.config import MonitorConfig, SerialConfig, load_config
from seplos_bms.app.monitor import TelemetryMonitor
from seplos_bms.app.sinks import PrintSink, publish_telemetry
from seplos_bms.core.errors import ConfigError, DeviceConnectError
from seplos_bms.model.sensors import describe_sensors
from seplos_bms.model.telemetry import Telemetry
from seplos_bms.protocol.decoder import FrameDecoder
from seplos_bms.protocol.errors import FrameRejected, LinkFrameError
from seplos_bms.protocol.link import parse_link_frame
from seplos_bms.protocol.versions import known_versions, layout_for
from seplos_bms.transport.errors import TransportOpenError
from seplos_bms.transport.uart import UARTTransport

_log = logging.getLogger(__name__)


# ---------------- Input helpers ----------------

def read_frame_lines(path: Path) -> List[str]:
    """Non-empty, non-comment lines of a capture file."""
    if not path.exists():
        raise ConfigError(f"Capture file not found: {path}")
    lines = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if s and not s.startswith("#"):
                lines.append(s)
    return lines


def frame_from_text(text: str, *, ascii_link: bool) -> bytes:
    """Turn one captured line into a binary frame body."""
    if ascii_link:
        return parse_link_frame(text.encode("ascii"))
    return bytes.fromhex(text.replace(":", " "))


# ---------------- Printing ----------------

def print_telemetry(telemetry: Telemetry, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(telemetry.as_dict()))
        return
    print(f"Frame 0x{telemetry.protocol_version:02X}: cells={telemetry.cell_count} "
          f"temps={telemetry.temperature_sensor_count if telemetry.temperature_sensor_count is not None else '-'}")
    publish_telemetry(telemetry, [PrintSink()])


# ---------------- Commands ----------------

def cmd_layouts() -> int:
    for version in known_versions():
        layout = layout_for(version)
        print(f"{version.label} (0x{int(version):02X}) total_voltage_scale={layout.total_voltage_scale}")
        for name, offset in layout.offsets().items():
            print(f"  {name:<20} {offset}")
        print()
    return 0


def cmd_sensors(args: argparse.Namespace) -> int:
    registered = None
    if args.config:
        registered = load_config(args.config).registered_sensors()
    for line in describe_sensors(registered):
        print(line)
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    texts = list(args.frames)
    if args.file:
        texts += read_frame_lines(Path(args.file))
    if not texts:
        raise ConfigError("No frames given", hint="Pass hex frames as arguments or use --file.")

    decoder = FrameDecoder(args.override)
    failures = 0

    for text in texts:
        try:
            frame = frame_from_text(text, ascii_link=args.ascii)
        except LinkFrameError as e:
            print(f"INVALID link frame: {e.reason}")
            failures += 1
            continue
        except ValueError as e:
            print(f"INVALID hex: {e}")
            failures += 1
            continue

        try:
            telemetry = decoder.decode(frame)
        except FrameRejected as e:
            print(f"REJECTED reason={e.reason}: {e}")
            failures += 1
            continue

        print_telemetry(telemetry, as_json=args.json)

    return 1 if failures else 0


def _serial_config(cfg: MonitorConfig, args: argparse.Namespace) -> SerialConfig:
    serial_cfg: Optional[SerialConfig] = cfg.serial
    if serial_cfg is None:
        if not args.port:
            raise ConfigError("No serial port configured", hint="Add a 'serial' section or pass --port.")
        serial_cfg = SerialConfig(port=args.port)
    elif args.port:
        serial_cfg = replace(serial_cfg, port=args.port)

    if args.baudrate:
        serial_cfg = replace(serial_cfg, baudrate=args.baudrate)
    return serial_cfg


def cmd_listen(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    serial_cfg = _serial_config(cfg, args)

    monitor = TelemetryMonitor(cfg)
    monitor.add_sink(PrintSink())
    monitor.dump_config()

    transport = UARTTransport(serial_cfg.port, baudrate=serial_cfg.baudrate, timeout=serial_cfg.timeout)
    try:
        transport.open()
    except TransportOpenError as e:
        raise DeviceConnectError(
            f"Cannot open {serial_cfg.port}: {e}",
            hint="Check the port name and permissions.",
        ) from None

    try:
        stats = monitor.run(transport, max_frames=args.max_frames)
    except KeyboardInterrupt:
        stats = monitor.stats
    finally:
        monitor.close()
        transport.close()

    _log.info(
        "LISTEN_DONE seen=%d decoded=%d rejected=%d link_errors=%d",
        stats.frames_seen, stats.frames_decoded, stats.frames_rejected, stats.link_errors,
    )
    print(f"Frames: decoded={stats.frames_decoded} rejected={stats.frames_rejected} link_errors={stats.link_errors}")
    return 0
