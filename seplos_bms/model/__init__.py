from .telemetry import Telemetry
from .sensors import SensorDef, SENSORS, describe_sensors

__all__ = ["Telemetry",
           "SensorDef",
           "SENSORS",
           "describe_sensors"]
