from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

from elflens.constants import (
    EI_CLASS,
    EI_DATA,
    EI_VERSION,
    ELF_MAGIC,
    ELF_MAGIC_U32,
    IDENT_SIZE,
    Capacity,
)
from elflens.errors import BadMagic, Truncated, UnsupportedCapacity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identification:
    magic: bytes
    capacity: int
    encoding: int
    version: int


def read_identification(data: bytes) -> Identification:
    """
    Decode the e_ident block. The magic is always checked first, as a
    big-endian u32, independent of the file's own encoding byte.
    """
    if len(data) < 4:
        raise BadMagic(f"Incorrect magic number: file has only {len(data)} byte(s)", magic=data.hex())

    magic = struct.unpack_from(">I", data, 0)[0]
    if magic != ELF_MAGIC_U32:
        raise BadMagic(f"Incorrect magic number: 0x{magic:08x}", magic=data[:4].hex())

    if len(data) <= EI_CLASS:
        raise Truncated("Identification block ends before the class byte", size=len(data))
    cap = data[EI_CLASS]
    if cap not in (Capacity.CLASS32, Capacity.CLASS64):
        raise UnsupportedCapacity(f"Unsupported ELF class: {cap}", capacity=cap)

    if len(data) < IDENT_SIZE:
        raise Truncated(
            f"Identification block truncated: {len(data)} of {IDENT_SIZE} bytes",
            size=len(data),
        )

    ident = Identification(
        magic=ELF_MAGIC,
        capacity=int(cap),
        encoding=int(data[EI_DATA]),
        version=int(data[EI_VERSION]),
    )
    logger.debug("identification: class=%d data=%d version=%d", ident.capacity, ident.encoding, ident.version)
    return ident
