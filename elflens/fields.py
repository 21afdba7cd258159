from __future__ import annotations

import struct

from elflens.constants import Encoding
from elflens.errors import Truncated

_FORMATS = {16: "H", 32: "I", 64: "Q"}


def byte_order(encoding: int) -> str:
    # Anything that is not LSB decodes as big-endian.
    return "<" if encoding == Encoding.LSB else ">"


def read_uint(data: bytes, off: int, width: int, encoding: int) -> int:
    """
    Extract an unsigned integer of `width` bits (16, 32 or 64) at `off`.
    64-bit values come back as exact Python ints.
    """
    fmt = _FORMATS.get(width)
    if fmt is None:
        raise ValueError(f"unsupported field width: {width}")
    size = width // 8
    if off < 0 or off + size > len(data):
        raise Truncated(
            f"{width}-bit field at offset {off} exceeds buffer of {len(data)} bytes",
            offset=off,
            width=width,
        )
    return struct.unpack_from(byte_order(encoding) + fmt, data, off)[0]


class FieldReader:
    """Binds a buffer to a byte order so record decoders read like a table."""

    def __init__(self, data: bytes, encoding: int) -> None:
        self.data = data
        self.encoding = encoding

    def u16(self, off: int) -> int:
        return read_uint(self.data, off, 16, self.encoding)

    def u32(self, off: int) -> int:
        return read_uint(self.data, off, 32, self.encoding)

    def u64(self, off: int) -> int:
        return read_uint(self.data, off, 64, self.encoding)
