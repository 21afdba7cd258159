from __future__ import annotations

import dataclasses
import logging
from typing import List, Sequence, Tuple

from elflens.constants import SHN_UNDEF
from elflens.errors import MalformedTable
from elflens.layout import Layout
from elflens.records import HeaderFields, ProgramHeader, SectionHeader
from elflens.source import Reader

logger = logging.getLogger(__name__)


def _check_entsize(kind: str, entsize: int, record_size: int) -> None:
    if entsize < record_size:
        raise MalformedTable(
            f"{kind} entry size {entsize} is smaller than the {record_size}-byte record",
            entsize=entsize,
            record_size=record_size,
        )


def parse_section_headers(
    reader: Reader, layout: Layout, header: HeaderFields, encoding: int
) -> Tuple[SectionHeader, ...]:
    """Decode e_shnum section headers in file order. shoff == 0 means no table."""
    if header.shoff == 0:
        logger.debug("section header table absent")
        return ()
    if header.shnum:
        _check_entsize("section header", header.shentsize, layout.section_header_size)

    sections: List[SectionHeader] = []
    for i in range(header.shnum):
        pos = header.shoff + header.shentsize * i
        raw = reader.read_at(pos, header.shentsize)
        sections.append(layout.decode_section_header(raw, encoding))
    logger.debug("parsed %d section header(s) at 0x%x", len(sections), header.shoff)
    return tuple(sections)


def parse_program_headers(
    reader: Reader, layout: Layout, header: HeaderFields, encoding: int
) -> Tuple[ProgramHeader, ...]:
    """Decode e_phnum program headers in file order. phoff == 0 means no table."""
    if header.phoff == 0:
        logger.debug("program header table absent")
        return ()
    if header.phnum:
        _check_entsize("program header", header.phentsize, layout.program_header_size)

    segments: List[ProgramHeader] = []
    for i in range(header.phnum):
        pos = header.phoff + header.phentsize * i
        raw = reader.read_at(pos, header.phentsize)
        segments.append(layout.decode_program_header(raw, encoding))
    logger.debug("parsed %d program header(s) at 0x%x", len(segments), header.phoff)
    return tuple(segments)


def string_at(table: bytes, index: int) -> str:
    """NUL-terminated string starting at `index` in a string table."""
    if index < 0 or index >= len(table):
        raise MalformedTable(
            f"string index {index} outside string table of {len(table)} bytes",
            index=index,
            table_size=len(table),
        )
    end = table.find(b"\x00", index)
    if end == -1:
        raise MalformedTable(
            f"string at index {index} is not NUL-terminated",
            index=index,
            table_size=len(table),
        )
    return table[index:end].decode("utf-8", errors="replace")


def resolve_section_names(
    reader: Reader, sections: Sequence[SectionHeader], shstrndx: int
) -> Tuple[SectionHeader, ...]:
    """
    Attach names from the section-name string table (e_shstrndx). Headers
    with name index 0 keep name=None. The string table is read once.
    """
    if not sections or shstrndx == SHN_UNDEF:
        return tuple(sections)
    if shstrndx >= len(sections):
        raise MalformedTable(
            f"section name string table index {shstrndx} out of range ({len(sections)} sections)",
            shstrndx=shstrndx,
            shnum=len(sections),
        )

    strtab = sections[shstrndx]
    table = reader.read_at(strtab.offset, strtab.size)

    named: List[SectionHeader] = []
    for sh in sections:
        if sh.name_index == 0:
            named.append(sh)
            continue
        named.append(dataclasses.replace(sh, name=string_at(table, sh.name_index)))
    logger.debug("resolved section names from section %d (%d bytes)", shstrndx, len(table))
    return tuple(named)
