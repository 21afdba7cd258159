from __future__ import annotations

from elflens.constants import (
    ELF32_HEADER_SIZE,
    ELF32_PHDR_SIZE,
    ELF32_SHDR_SIZE,
    ELF64_HEADER_SIZE,
    ELF64_PHDR_SIZE,
    ELF64_SHDR_SIZE,
    IDENT_SIZE,
    Capacity,
)
from elflens.errors import UnsupportedCapacity
from elflens.fields import FieldReader
from elflens.records import HeaderFields, ProgramHeader, SectionHeader


class Layout:
    """
    Byte layout of one ELF class. Chosen once from EI_CLASS; every header
    and table record of the file is decoded through the same instance.

    All offsets passed to the decode methods are relative to the start of
    the record buffer. `decode_header` expects the bytes that follow the
    16-byte identification block.
    """

    capacity: Capacity
    header_size: int
    section_header_size: int
    program_header_size: int

    @property
    def body_size(self) -> int:
        return self.header_size - IDENT_SIZE

    def decode_header(self, raw: bytes, encoding: int) -> HeaderFields:
        raise NotImplementedError

    def decode_section_header(self, raw: bytes, encoding: int) -> SectionHeader:
        raise NotImplementedError

    def decode_program_header(self, raw: bytes, encoding: int) -> ProgramHeader:
        raise NotImplementedError


class Elf32Layout(Layout):
    capacity = Capacity.CLASS32
    header_size = ELF32_HEADER_SIZE
    section_header_size = ELF32_SHDR_SIZE
    program_header_size = ELF32_PHDR_SIZE

    def decode_header(self, raw: bytes, encoding: int) -> HeaderFields:
        f = FieldReader(raw, encoding)
        return HeaderFields(
            type=f.u16(0),
            machine=f.u16(2),
            version=f.u32(4),
            entry=f.u32(8),
            phoff=f.u32(12),
            shoff=f.u32(16),
            flags=f.u32(20),
            ehsize=f.u16(24),
            phentsize=f.u16(26),
            phnum=f.u16(28),
            shentsize=f.u16(30),
            shnum=f.u16(32),
            shstrndx=f.u16(34),
        )

    def decode_section_header(self, raw: bytes, encoding: int) -> SectionHeader:
        f = FieldReader(raw, encoding)
        return SectionHeader(
            name_index=f.u32(0),
            type=f.u32(4),
            flags=f.u32(8),
            addr=f.u32(12),
            offset=f.u32(16),
            size=f.u32(20),
            link=f.u32(24),
            info=f.u32(28),
            addralign=f.u32(32),
            entsize=f.u32(36),
        )

    def decode_program_header(self, raw: bytes, encoding: int) -> ProgramHeader:
        # Elf32_Phdr: p_flags sits after p_memsz.
        f = FieldReader(raw, encoding)
        return ProgramHeader(
            type=f.u32(0),
            offset=f.u32(4),
            vaddr=f.u32(8),
            paddr=f.u32(12),
            filesz=f.u32(16),
            memsz=f.u32(20),
            flags=f.u32(24),
            align=f.u32(28),
        )


class Elf64Layout(Layout):
    capacity = Capacity.CLASS64
    header_size = ELF64_HEADER_SIZE
    section_header_size = ELF64_SHDR_SIZE
    program_header_size = ELF64_PHDR_SIZE

    def decode_header(self, raw: bytes, encoding: int) -> HeaderFields:
        f = FieldReader(raw, encoding)
        return HeaderFields(
            type=f.u16(0),
            machine=f.u16(2),
            version=f.u32(4),
            entry=f.u64(8),
            phoff=f.u64(16),
            shoff=f.u64(24),
            flags=f.u32(32),
            ehsize=f.u16(36),
            phentsize=f.u16(38),
            phnum=f.u16(40),
            shentsize=f.u16(42),
            shnum=f.u16(44),
            shstrndx=f.u16(46),
        )

    def decode_section_header(self, raw: bytes, encoding: int) -> SectionHeader:
        f = FieldReader(raw, encoding)
        return SectionHeader(
            name_index=f.u32(0),
            type=f.u32(4),
            flags=f.u64(8),
            addr=f.u64(16),
            offset=f.u64(24),
            size=f.u64(32),
            link=f.u32(40),
            info=f.u32(44),
            addralign=f.u64(48),
            entsize=f.u64(56),
        )

    def decode_program_header(self, raw: bytes, encoding: int) -> ProgramHeader:
        # Elf64_Phdr: p_flags follows p_type directly.
        f = FieldReader(raw, encoding)
        return ProgramHeader(
            type=f.u32(0),
            flags=f.u32(4),
            offset=f.u64(8),
            vaddr=f.u64(16),
            paddr=f.u64(24),
            filesz=f.u64(32),
            memsz=f.u64(40),
            align=f.u64(48),
        )


_LAYOUTS = {
    Capacity.CLASS32: Elf32Layout(),
    Capacity.CLASS64: Elf64Layout(),
}


def layout_for(capacity: int) -> Layout:
    try:
        return _LAYOUTS[Capacity(capacity)]
    except (KeyError, ValueError):
        raise UnsupportedCapacity(f"Unsupported ELF class: {capacity}", capacity=capacity) from None
