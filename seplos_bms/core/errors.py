# seplos_bms/core/errors.py
from __future__ import annotations


class SeplosError(Exception):
    """
    Base class for all expected operational errors in seplos_bms.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, service APIs, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / setup errors (no hardware access yet)
# ---------------------------------------------------------------------------

class ConfigError(SeplosError):
    """
    Monitor configuration is invalid.

    Examples:
      - config file missing or not a YAML mapping
      - negative or non-integer cell_count_override
      - unknown sensor name in the sensors list
    """
    code = "config_error"


# ---------------------------------------------------------------------------
# Transport / connection lifecycle errors
# ---------------------------------------------------------------------------

class DeviceConnectError(SeplosError):
    """
    Serial port could not be opened.

    Examples:
      - port not found
      - permission denied
      - port already in use
    """
    code = "device_connect_error"


class DeviceDisconnectedError(SeplosError):
    """
    Port was open but reading from it failed.

    Examples:
      - USB-RS485 adapter unplugged
      - OS-level I/O error during read
    """
    code = "device_disconnected"
