"""Seplos BMS telemetry frame decoding."""

__version__ = "0.3.0"
