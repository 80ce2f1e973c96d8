# seplos_bms/app/config.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from seplos_bms.core.errors import ConfigError
from seplos_bms.model.sensors import SENSORS, unknown_sensor_names
from seplos_bms.transport.uart import DEFAULT_BAUDRATE


@dataclass(frozen=True)
class SerialConfig:
    port: str
    baudrate: int = DEFAULT_BAUDRATE
    timeout: float = 0.1


@dataclass(frozen=True)
class MonitorConfig:
    cell_count_override: int = 0
    sensors: Optional[Tuple[str, ...]] = None  # None = publish every sensor
    serial: Optional[SerialConfig] = None

    def registered_sensors(self) -> Tuple[str, ...]:
        return self.sensors if self.sensors is not None else tuple(SENSORS)


def load_config(path: str | Path) -> MonitorConfig:
    """
    Load a monitor config from YAML.

    Raises:
        ConfigError: missing file, malformed YAML or invalid values.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}", hint="Pass --config <file.yml>.")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from None

    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    return config_from_dict(raw)


def config_from_dict(raw: Dict[str, Any]) -> MonitorConfig:
    override = _parse_override(raw.get("cell_count_override", 0))

    sensors = raw.get("sensors")
    if sensors is not None:
        if not isinstance(sensors, list) or not all(isinstance(s, str) for s in sensors):
            raise ConfigError("'sensors' must be a list of sensor names")
        unknown = unknown_sensor_names(sensors)
        if unknown:
            raise ConfigError(
                f"Unknown sensor name(s): {', '.join(unknown)}",
                hint="Run 'seplos-bms sensors' for the list of names.",
                details={"unknown": unknown},
            )
        sensors = tuple(sensors)

    serial_cfg = None
    if raw.get("serial") is not None:
        serial_cfg = _parse_serial(raw["serial"])

    return MonitorConfig(cell_count_override=override, sensors=sensors, serial=serial_cfg)


def _parse_override(v: Any) -> int:
    # bool is an int subclass; reject it explicitly
    if v is None:
        return 0
    if isinstance(v, bool) or not isinstance(v, int):
        raise ConfigError(f"cell_count_override must be an integer (got {v!r})")
    if v < 0:
        raise ConfigError(f"cell_count_override must be >= 0 (got {v})")
    return v


def _parse_serial(section: Any) -> SerialConfig:
    if not isinstance(section, dict):
        raise ConfigError("'serial' must be a mapping")

    port = section.get("port")
    if not port or not isinstance(port, str):
        raise ConfigError("'serial.port' is required")

    baudrate = section.get("baudrate", DEFAULT_BAUDRATE)
    if isinstance(baudrate, bool) or not isinstance(baudrate, int) or baudrate <= 0:
        raise ConfigError(f"'serial.baudrate' must be a positive integer (got {baudrate!r})")

    timeout = section.get("timeout", 0.1)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(f"'serial.timeout' must be a positive number (got {timeout!r})")

    return SerialConfig(port=port, baudrate=baudrate, timeout=float(timeout))
