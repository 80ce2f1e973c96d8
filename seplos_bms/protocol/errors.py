# seplos_bms/protocol/errors.py

class ProtocolError(Exception):
    """Base for protocol-level failures (link framing / frame decoding)."""

class DecodeError(ProtocolError):
    pass

class FrameRejected(DecodeError):
    """The whole frame was refused; no field of it may be published."""
    reason: str = "rejected"

class FrameTooShort(FrameRejected):
    reason = "too_short"

    def __init__(self, length: int, minimum: int):
        super().__init__(f"frame too short: {length} bytes, minimum is {minimum}")
        self.length = length
        self.minimum = minimum

class UnknownProtocolVersion(FrameRejected):
    reason = "unknown_version"

    def __init__(self, version: int):
        super().__init__(f"unsupported protocol version: 0x{version:02X}")
        self.version = version

class LinkFrameError(ProtocolError):
    def __init__(self, reason: str, raw: bytes = b""):
        super().__init__(f"invalid link frame ({reason})")
        self.reason = reason
        self.raw = raw
