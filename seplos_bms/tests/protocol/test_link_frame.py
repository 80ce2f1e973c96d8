from __future__ import annotations

import pytest

from seplos_bms.protocol.errors import LinkFrameError
from seplos_bms.protocol.link import LinkFrameAssembler, frame_checksum, parse_link_frame


def test_checksum_known_vector():
    # request frame for pack 0 telemetry: ~20004642E00200FD37\r
    assert frame_checksum(b"20004642E00200") == 0xFD37


def test_checksum_fits_16_bits():
    assert 0 <= frame_checksum(b"") <= 0xFFFF


def test_parse_returns_binary_body(link_frame):
    payload = bytes([0x21, 0x00, 0x46, 0x00, 0x10, 0x96, 0x00, 0x03])
    assert parse_link_frame(link_frame(payload)) == payload


def test_parse_tolerates_leading_noise_and_missing_eoi(link_frame):
    payload = bytes([0x25, 0x01, 0x46, 0x00])
    raw = b"\x00\xff" + link_frame(payload).rstrip(b"\r")
    assert parse_link_frame(raw) == payload


def test_parse_checksum_mismatch(link_frame):
    raw = bytearray(link_frame(bytes([0x21, 0x00, 0x46, 0x00])))
    raw[-2] = ord("0") if raw[-2] != ord("0") else ord("1")
    with pytest.raises(LinkFrameError) as ei:
        parse_link_frame(bytes(raw))
    assert ei.value.reason.startswith("checksum")


def test_parse_checksum_can_be_skipped(link_frame):
    raw = bytearray(link_frame(bytes([0x21, 0x00])))
    raw[-2] = ord("0") if raw[-2] != ord("0") else ord("1")
    assert parse_link_frame(bytes(raw), verify_checksum=False) == bytes([0x21, 0x00])


@pytest.mark.parametrize(
    "raw,reason",
    [
        (b"2100460000\r", "no_soi"),
        (b"~21\r", "too_short"),
        (b"~210FFFF\r", "odd_length"),
        (b"~21ZZFFFF\r", "not_hex"),
    ],
)
def test_parse_invalid_frames(raw, reason):
    with pytest.raises(LinkFrameError) as ei:
        parse_link_frame(raw)
    assert ei.value.reason == reason


@pytest.mark.parametrize("raw", [b"~21000x1F\r", b"~2100+1FF\r", b"~2100 1FF\r", b"~21001_FF\r"])
def test_checksum_field_must_be_hex_digits(raw):
    with pytest.raises(LinkFrameError) as ei:
        parse_link_frame(raw, verify_checksum=False)
    assert ei.value.reason == "not_hex"


# -- Reassembly -----------------------------------------------------------------

def test_assembler_joins_split_frame(link_frame):
    raw = link_frame(bytes([0x21, 0x00, 0x46, 0x00, 0x10]))
    asm = LinkFrameAssembler()

    asm.feed(raw[:5])
    assert asm.get_frame() is None
    asm.feed(raw[5:])
    assert asm.get_frame() == raw
    assert asm.get_frame() is None


def test_assembler_splits_back_to_back_frames(link_frame):
    a = link_frame(bytes([0x21, 0x00]))
    b = link_frame(bytes([0x25, 0x01]))
    asm = LinkFrameAssembler()
    asm.feed(b"\xff\x00" + a + b"\n" + b)

    assert asm.get_frame() == a
    assert asm.get_frame() == b
    assert asm.get_frame() is None
    assert asm.buffer == bytearray()


def test_assembler_drops_truncated_frame_for_newer_soi(link_frame):
    good = link_frame(bytes([0x21, 0x00, 0x46]))
    asm = LinkFrameAssembler()
    asm.feed(b"~2100AB" + good)
    assert asm.get_frame() == good


def test_assembler_discards_oversized_partial():
    asm = LinkFrameAssembler(max_frame_bytes=16)
    asm.feed(b"~" + b"0" * 40)
    assert asm.get_frame() is None
    assert asm.buffer == bytearray()
