from .telemetry_sink import TelemetrySink

__all__ = ["TelemetrySink"]
