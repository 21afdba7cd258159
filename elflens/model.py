from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from elflens.constants import (
    capacity_name,
    encoding_name,
    format_segment_flags,
    machine_name,
    object_type_name,
    section_type_name,
    segment_type_name,
)
from elflens.elf import ElfFile


def utc_now_iso() -> str:
    """
    UTC timestamp in ISO-8601 with 'Z' suffix, seconds precision.
    Example: 2026-01-08T17:12:34Z
    """
    return (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


class InputEvidence(BaseModel):
    input_path: str
    file_size: int
    sha256: str
    md5: str


class ElfSummary(BaseModel):
    capacity: int
    capacity_name: Optional[str] = None
    encoding: int
    encoding_name: Optional[str] = None
    type: int
    type_name: Optional[str] = None
    machine: int
    machine_name: Optional[str] = None
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


class SectionRecord(BaseModel):
    index: int
    name: Optional[str] = None
    name_index: int
    type: int
    type_name: Optional[str] = None
    flags: int
    addr: int
    offset: int
    size: int
    link: int
    info: int
    addralign: int
    entsize: int


class SegmentRecord(BaseModel):
    index: int
    type: int
    type_name: Optional[str] = None
    offset: int
    vaddr: int
    paddr: int
    filesz: int
    memsz: int
    flags: int
    flags_text: str
    align: int


class Report(BaseModel):
    schema_version: str = "1.0"
    report_id: str
    timestamp_utc: str = Field(default_factory=utc_now_iso)

    input: InputEvidence
    summary: ElfSummary
    sections: List[SectionRecord] = Field(default_factory=list)
    segments: List[SegmentRecord] = Field(default_factory=list)
    tool: Dict[str, Any] = Field(default_factory=dict)
    config: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_elf(cls, elf: ElfFile, evidence: InputEvidence, *, report_id: str, **kw: Any) -> "Report":
        summary = ElfSummary(
            capacity=elf.capacity,
            capacity_name=capacity_name(elf.capacity),
            encoding=elf.encoding,
            encoding_name=encoding_name(elf.encoding),
            type=elf.type,
            type_name=object_type_name(elf.type),
            machine=elf.machine,
            machine_name=machine_name(elf.machine),
            version=elf.version,
            entry=elf.entry,
            phoff=elf.phoff,
            shoff=elf.shoff,
            flags=elf.flags,
            ehsize=elf.ehsize,
            phentsize=elf.phentsize,
            phnum=elf.phnum,
            shentsize=elf.shentsize,
            shnum=elf.shnum,
            shstrndx=elf.shstrndx,
        )
        sections = [
            SectionRecord(
                index=i,
                name=sh.name,
                name_index=sh.name_index,
                type=sh.type,
                type_name=section_type_name(sh.type),
                flags=sh.flags,
                addr=sh.addr,
                offset=sh.offset,
                size=sh.size,
                link=sh.link,
                info=sh.info,
                addralign=sh.addralign,
                entsize=sh.entsize,
            )
            for i, sh in enumerate(elf.section_headers)
        ]
        segments = [
            SegmentRecord(
                index=i,
                type=ph.type,
                type_name=segment_type_name(ph.type),
                offset=ph.offset,
                vaddr=ph.vaddr,
                paddr=ph.paddr,
                filesz=ph.filesz,
                memsz=ph.memsz,
                flags=ph.flags,
                flags_text=format_segment_flags(ph.flags),
                align=ph.align,
            )
            for i, ph in enumerate(elf.program_headers)
        ]
        return cls(
            report_id=report_id,
            input=evidence,
            summary=summary,
            sections=sections,
            segments=segments,
            **kw,
        )
