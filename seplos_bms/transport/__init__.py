from .base import Transport
from .uart import UARTTransport
from .errors import TransportError, TransportOpenError, TransportIOError

__all__ = ["Transport", "UARTTransport", "TransportError", "TransportOpenError", "TransportIOError"]
