from __future__ import annotations

from enum import IntEnum
from typing import Optional

ELF_MAGIC = b"\x7fELF"
ELF_MAGIC_U32 = 0x7F454C46

# Binary layout sizes (bytes)
IDENT_SIZE = 16
ELF32_HEADER_SIZE = 52
ELF64_HEADER_SIZE = 64
ELF32_SHDR_SIZE = 40
ELF64_SHDR_SIZE = 64
ELF32_PHDR_SIZE = 32
ELF64_PHDR_SIZE = 56

# Identification byte offsets
EI_CLASS = 4
EI_DATA = 5
EI_VERSION = 6

SHN_UNDEF = 0


class Capacity(IntEnum):
    """ELF class (EI_CLASS)."""

    NONE = 0
    CLASS32 = 1
    CLASS64 = 2

    A32BIT = 1
    A64BIT = 2


class Encoding(IntEnum):
    """ELF data encoding (EI_DATA)."""

    NONE = 0
    LSB = 1
    MSB = 2

    LE = 1
    BE = 2


class ObjectType(IntEnum):
    NONE = 0
    RELOCATABLE = 1
    EXECUTABLE = 2
    DYNAMIC = 3
    CORE = 4


class Version(IntEnum):
    NONE = 0
    CURRENT = 1


class Machine(IntEnum):
    """
    Sparse e_machine table. Values 0-10 come from the System V ABI, the rest
    from processor supplements. Unknown values are valid and simply unnamed.
    """

    NONE = 0
    M32 = 1
    SPARC = 2
    I386 = 3
    M68K = 4
    M88K = 5
    I860 = 7
    MIPS = 8
    S370 = 9
    MIPS_RS4_BE = 10
    PARISC = 15
    SPARC32PLUS = 18
    PPC = 20
    PPC64 = 21
    S390 = 22
    ARM = 40
    SH = 42
    SPARCV9 = 43
    IA_64 = 50
    X86_64 = 62
    AVR = 83
    XTENSA = 94
    MSP430 = 105
    AARCH64 = 183
    RISCV = 243
    BPF = 247
    LOONGARCH = 258


class SegmentType(IntEnum):
    """Program header p_type values."""

    PT_NULL = 0
    PT_LOAD = 1
    PT_DYNAMIC = 2
    PT_INTERP = 3
    PT_NOTE = 4
    PT_SHLIB = 5
    PT_PHDR = 6
    PT_TLS = 7
    PT_GNU_EH_FRAME = 0x6474E550
    PT_GNU_STACK = 0x6474E551
    PT_GNU_RELRO = 0x6474E552
    PT_GNU_PROPERTY = 0x6474E553
    PT_ARM_EXIDX = 0x70000001


class SectionType(IntEnum):
    """Section header sh_type values."""

    SHT_NULL = 0
    SHT_PROGBITS = 1
    SHT_SYMTAB = 2
    SHT_STRTAB = 3
    SHT_RELA = 4
    SHT_HASH = 5
    SHT_DYNAMIC = 6
    SHT_NOTE = 7
    SHT_NOBITS = 8
    SHT_REL = 9
    SHT_SHLIB = 10
    SHT_DYNSYM = 11
    SHT_INIT_ARRAY = 14
    SHT_FINI_ARRAY = 15
    SHT_PREINIT_ARRAY = 16
    SHT_GROUP = 17
    SHT_SYMTAB_SHNDX = 18
    SHT_GNU_HASH = 0x6FFFFFF6
    SHT_GNU_VERDEF = 0x6FFFFFFD
    SHT_GNU_VERNEED = 0x6FFFFFFE
    SHT_GNU_VERSYM = 0x6FFFFFFF
    SHT_ARM_EXIDX = 0x70000001
    SHT_ARM_ATTRIBUTES = 0x70000003


class SegmentFlags(IntEnum):
    PF_X = 1
    PF_W = 2
    PF_R = 4


def _enum_name(enum_cls, value: int) -> Optional[str]:
    try:
        return enum_cls(value).name
    except ValueError:
        return None


def capacity_name(value: int) -> Optional[str]:
    return _enum_name(Capacity, value)


def encoding_name(value: int) -> Optional[str]:
    return _enum_name(Encoding, value)


def machine_name(value: int) -> Optional[str]:
    return _enum_name(Machine, value)


def object_type_name(value: int) -> Optional[str]:
    return _enum_name(ObjectType, value)


def segment_type_name(value: int) -> Optional[str]:
    return _enum_name(SegmentType, value)


def section_type_name(value: int) -> Optional[str]:
    return _enum_name(SectionType, value)


def parse_segment_type(text: str) -> int:
    """
    Accepts a decimal or 0x-prefixed integer, or a PT_* name with or without
    the prefix (case-insensitive). Raises ValueError otherwise.
    """
    s = (text or "").strip()
    if not s:
        raise ValueError("empty segment type")
    try:
        return int(s, 0)
    except ValueError:
        pass
    key = s.upper()
    if not key.startswith("PT_"):
        key = "PT_" + key
    try:
        return int(SegmentType[key])
    except KeyError:
        raise ValueError(f"unknown segment type: {text}") from None


def format_segment_flags(flags: int) -> str:
    """Render p_flags as readelf does, e.g. 'R E' or 'RW '."""
    return "".join(
        [
            "R" if flags & SegmentFlags.PF_R else " ",
            "W" if flags & SegmentFlags.PF_W else " ",
            "E" if flags & SegmentFlags.PF_X else " ",
        ]
    )
