# seplos_bms/cli/main.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from seplos_bms.common.logging_config import configure_logging, parse_level
from seplos_bms.core.errors import SeplosError

from seplos_bms.cli.args import parse_args
from seplos_bms.cli.commands import (
    cmd_layouts,
    cmd_sensors,
    cmd_decode,
    cmd_listen,
)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    try:
        level = parse_level(args.log_level)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 2
    configure_logging(level, log_file=Path(args.log_file) if args.log_file else None)

    try:
        if args.cmd == "layouts":
            return cmd_layouts()
        if args.cmd == "sensors":
            return cmd_sensors(args)
        if args.cmd == "decode":
            return cmd_decode(args)
        if args.cmd == "listen":
            return cmd_listen(args)

        return 2
    except SeplosError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1
