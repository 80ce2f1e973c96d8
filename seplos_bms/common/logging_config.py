# seplos_bms/common/logging_config.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class LogDefaults:
    level: int = logging.INFO
    fmt: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    console_fmt: str = "[%(levelname)s] %(message)s"

DEFAULTS = LogDefaults()


def parse_level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{name}'")
    return level


def configure_logging(level: int = DEFAULTS.level, *, log_file: Optional[Path] = None) -> None:
    """
    Attach console (and optional file) handlers to the root logger (idempotent).
    """
    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_seplos_console", False) for h in root.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(DEFAULTS.console_fmt))
        ch._seplos_console = True  # type: ignore[attr-defined]
        root.addHandler(ch)

    if log_file is None:
        return

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    target = str(log_file.resolve())
    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
            return

    fh = logging.FileHandler(log_file, encoding="utf-8", delay=True)
    fh.setFormatter(logging.Formatter(DEFAULTS.fmt))
    root.addHandler(fh)
