# seplos_bms/cli/args.py
from __future__ import annotations

import argparse
from typing import Optional


def _non_negative_int(v: str) -> int:
    try:
        n = int(v, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer '{v}'") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"Value must be >= 0 (got {n})")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seplos-bms")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG shows frame hex dumps).")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")

    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("layouts", help="Print the registered protocol layouts.")

    p_sensors = sub.add_parser("sensors", help="Print the sensor catalogue.")
    p_sensors.add_argument("--config", default=None, help="Mark sensors registered in this config.")

    p_decode = sub.add_parser("decode", help="Decode captured frames.")
    p_decode.add_argument("frames", nargs="*", help="Frames as hex strings (spaces allowed).")
    p_decode.add_argument("--file", default=None, help="Read frames from a file, one per line.")
    p_decode.add_argument("--ascii", action="store_true", help="Frames are ASCII link frames (~...CHKSUM).")
    p_decode.add_argument("--override", type=_non_negative_int, default=0, help="Cell count override (0 = use frame).")
    p_decode.add_argument("--json", action="store_true", help="Print one JSON object per frame.")

    p_listen = sub.add_parser("listen", help="Decode frames passively from the serial bus.")
    p_listen.add_argument("--config", required=True, help="Monitor config (YAML).")
    p_listen.add_argument("--port", default=None, help="Override serial.port from the config.")
    p_listen.add_argument("--baudrate", type=int, default=None)
    p_listen.add_argument("--max-frames", type=int, default=None)

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
