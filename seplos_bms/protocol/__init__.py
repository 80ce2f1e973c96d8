# protocol/__init__.py

from .versions import ProtocolVersion, FieldLayout, layout_for, is_known_version, known_versions
from .decoder import FrameDecoder, decode
from .link import LinkFrameAssembler, parse_link_frame, frame_checksum
from .errors import (
    ProtocolError,
    DecodeError,
    FrameRejected,
    FrameTooShort,
    UnknownProtocolVersion,
    LinkFrameError,
)

__all__ = [
    "ProtocolVersion", "FieldLayout", "layout_for", "is_known_version", "known_versions",
    "FrameDecoder", "decode",
    "LinkFrameAssembler", "parse_link_frame", "frame_checksum",
    "ProtocolError", "DecodeError", "FrameRejected", "FrameTooShort",
    "UnknownProtocolVersion", "LinkFrameError",
]
