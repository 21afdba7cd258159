from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

from elflens.constants import IDENT_SIZE
from elflens.errors import IOFailure, NotFound
from elflens.ident import read_identification
from elflens.layout import layout_for
from elflens.records import ProgramHeader, SectionHeader
from elflens.source import BytesSource, FileSource
from elflens.tables import parse_program_headers, parse_section_headers, resolve_section_names

logger = logging.getLogger(__name__)

Source = Union[FileSource, BytesSource]


@dataclass(frozen=True)
class ElfFile:
    """
    A fully decoded ELF file. Produced only by `load` / `load_bytes`, and
    never partially populated.
    """

    capacity: int
    encoding: int
    type: int
    machine: int
    version: int
    entry: int
    phoff: int
    shoff: int
    flags: int
    ehsize: int
    phentsize: int
    phnum: int
    shentsize: int
    shnum: int
    shstrndx: int
    program_headers: Tuple[ProgramHeader, ...] = ()
    section_headers: Tuple[SectionHeader, ...] = ()
    source: Optional[Source] = field(default=None, repr=False, compare=False)

    @property
    def name(self) -> str:
        return self.source.name if self.source is not None else "<unknown>"

    def find_segment(self, segment_type: int) -> Optional[ProgramHeader]:
        for ph in self.program_headers:
            if ph.type == segment_type:
                return ph
        return None

    def find_section(self, name: str) -> Optional[SectionHeader]:
        for sh in self.section_headers:
            if sh.name is not None and sh.name == name:
                return sh
        return None

    def read_segment(self, segment_type: int) -> bytes:
        """Raw file bytes of the first segment of `segment_type` (p_filesz bytes at p_offset)."""
        ph = self.find_segment(segment_type)
        if ph is None:
            raise NotFound(f"No segment of type 0x{segment_type:x}", segment_type=segment_type)
        return self._read_range(ph.offset, ph.filesz)

    def read_section(self, name: str) -> bytes:
        """Raw file bytes of the first section called `name` (sh_size bytes at sh_offset)."""
        sh = self.find_section(name)
        if sh is None:
            raise NotFound(f"No section named {name!r}", section=name)
        return self._read_range(sh.offset, sh.size)

    def _read_range(self, offset: int, size: int) -> bytes:
        if self.source is None:
            raise IOFailure("ElfFile has no byte source to read from")
        with self.source.open() as reader:
            return reader.read_at(offset, size)


def _decode(source: Source) -> ElfFile:
    with source.open() as reader:
        ident = read_identification(reader.read_at(0, min(IDENT_SIZE, reader.size)))
        layout = layout_for(ident.capacity)

        header = layout.decode_header(reader.read_at(IDENT_SIZE, layout.body_size), ident.encoding)
        logger.debug(
            "%s: header type=%d machine=%d entry=0x%x phoff=%d shoff=%d",
            source.name,
            header.type,
            header.machine,
            header.entry,
            header.phoff,
            header.shoff,
        )

        sections = parse_section_headers(reader, layout, header, ident.encoding)
        sections = resolve_section_names(reader, sections, header.shstrndx)
        segments = parse_program_headers(reader, layout, header, ident.encoding)

    return ElfFile(
        capacity=ident.capacity,
        encoding=ident.encoding,
        type=header.type,
        machine=header.machine,
        version=header.version,
        entry=header.entry,
        phoff=header.phoff,
        shoff=header.shoff,
        flags=header.flags,
        ehsize=header.ehsize,
        phentsize=header.phentsize,
        phnum=header.phnum,
        shentsize=header.shentsize,
        shnum=header.shnum,
        shstrndx=header.shstrndx,
        program_headers=segments,
        section_headers=sections,
        source=source,
    )


def load(path: Union[str, Path]) -> ElfFile:
    """
    Decode the ELF file at `path`. Raises an ElfError subclass on any
    failure; the file handle is closed on every path.
    """
    return _decode(FileSource(path))


def load_bytes(data: bytes, name: str = "<memory>") -> ElfFile:
    """Decode an ELF image already held in memory."""
    return _decode(BytesSource(data, name=name))
