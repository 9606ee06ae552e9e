"""Binary record framing for the Neutral IPC protocol (record version 0).

Every message in either direction is a single record: a fixed 12-byte
header followed by two content blocks.

    reserved        1 byte   always 0
    control         1 byte   action on requests, status on responses
    content-format  1 byte   of block 1
    content-length  4 bytes  of block 1, big endian
    content-format  1 byte   of block 2
    content-length  4 bytes  of block 2, big endian, may be zero

All text is UTF-8.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .constants import HEADER_LEN, MAX_CONTENT_LENGTH, RESERVED
from .errors import ProtocolError

_HEADER = struct.Struct(">BBBIBI")


@dataclass(frozen=True)
class RecordHeader:
    control: int
    format1: int
    length1: int
    format2: int
    length2: int
    reserved: int = RESERVED

    @property
    def body_length(self) -> int:
        return self.length1 + self.length2


@dataclass(frozen=True)
class Record:
    control: int
    format1: int
    content1: bytes
    format2: int
    content2: bytes

    @property
    def header(self) -> RecordHeader:
        return RecordHeader(self.control, self.format1, len(self.content1), self.format2, len(self.content2))


def encode_header(control: int, format1: int, length1: int, format2: int, length2: int) -> bytes:
    for name, length in (("length1", length1), ("length2", length2)):
        if not 0 <= length <= MAX_CONTENT_LENGTH:
            raise ValueError(f"'{name}' does not fit in an unsigned 32-bit integer")
    return _HEADER.pack(RESERVED, control, format1, length1, format2, length2)


def decode_header(raw: bytes) -> RecordHeader:
    if len(raw) != HEADER_LEN:
        raise ProtocolError(f"Invalid header length: expected {HEADER_LEN} bytes, got {len(raw)}")

    reserved, control, format1, length1, format2, length2 = _HEADER.unpack(raw)
    if reserved != RESERVED:
        raise ProtocolError(f"Unsupported record: reserved byte is {reserved}")
    return RecordHeader(control, format1, length1, format2, length2, reserved)


def encode_record(control: int, format1: int, content1: bytes | str, format2: int, content2: bytes | str) -> bytes:
    if isinstance(content1, str):
        content1 = content1.encode()
    if isinstance(content2, str):
        content2 = content2.encode()
    header = encode_header(control, format1, len(content1), format2, len(content2))
    return header + content1 + content2


def decode_record(raw: bytes) -> Record:
    """Decode a complete record held in memory, rejecting short or trailing data."""
    header = decode_header(raw[:HEADER_LEN])
    body = raw[HEADER_LEN:]
    if len(body) != header.body_length:
        raise ProtocolError(f"Record body is {len(body)} bytes, header announces {header.body_length}")
    return Record(
        control=header.control,
        format1=header.format1,
        content1=body[: header.length1],
        format2=header.format2,
        content2=body[header.length1 :],
    )
