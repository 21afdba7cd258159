from __future__ import annotations

import pytest

from elflens.elf import load_bytes
from elflens.errors import MalformedTable, Truncated
from elflens.records import SectionHeader
from elflens.tables import resolve_section_names, string_at

from elf_images import ImageSpec, Sec, Seg, build_image, build_strtab


class _NoReads:
    def read_at(self, offset, size):
        raise AssertionError(f"unexpected read at {offset}")


def _sections():
    return [
        Sec(name=None, type=0, addralign=0),
        Sec(name=".text", offset=0x200, size=4),
        Sec(name=".data", offset=0x204, size=4),
        Sec(name=".shstrtab"),
    ]


def _spec(**kw) -> ImageSpec:
    base = dict(
        elf_class=1,
        data=1,
        phoff=0x80,
        shoff=0x400,
        segments=[Seg(type=1, offset=0x200, filesz=8, memsz=8, flags=5, align=4)],
        sections=_sections(),
        shstrndx=3,
        strtab_offset=0x300,
        blobs=[(0x200, b"ABCDEFGH")],
    )
    base.update(kw)
    return ImageSpec(**base)


@pytest.mark.parametrize("elf_class", [1, 2])
@pytest.mark.parametrize("data", [1, 2])
def test_tables_decode_for_every_class_and_encoding(elf_class: int, data: int):
    f = load_bytes(build_image(_spec(elf_class=elf_class, data=data)))

    assert [s.name for s in f.section_headers] == [None, ".text", ".data", ".shstrtab"]
    assert f.section_headers[1].offset == 0x200
    assert f.section_headers[1].size == 4
    assert f.section_headers[3].type == 3
    ph = f.program_headers[0]
    assert (ph.type, ph.offset, ph.filesz, ph.flags, ph.align) == (1, 0x200, 8, 5, 4)


def test_zero_shoff_means_no_section_table():
    f = load_bytes(build_image(_spec(shoff=0, sections=[], shstrndx=0, strtab_offset=0)))
    assert f.section_headers == ()
    assert len(f.program_headers) == 1


def test_zero_shoff_ignores_counts_in_header():
    # e_shnum/e_shstrndx set but e_shoff == 0: the table is absent.
    img = bytearray(build_image(_spec(shoff=0, sections=[], shstrndx=0, strtab_offset=0, shnum=5)))
    img[50:52] = (2).to_bytes(2, "little")  # e_shstrndx
    f = load_bytes(bytes(img))
    assert f.section_headers == ()
    assert f.shnum == 5


def test_name_resolution_skipped_without_sections():
    assert resolve_section_names(_NoReads(), (), 3) == ()


def test_name_resolution_skipped_without_string_table():
    sections = (SectionHeader(name_index=1, type=1, flags=0, addr=0, offset=0, size=0, link=0, info=0, addralign=0, entsize=0),)
    out = resolve_section_names(_NoReads(), sections, 0)
    assert out[0].name is None


def test_zero_phoff_means_no_program_table():
    f = load_bytes(build_image(_spec(phoff=0, segments=[])))
    assert f.program_headers == ()
    assert len(f.section_headers) == 4


def test_null_section_has_no_name():
    f = load_bytes(build_image(_spec()))
    assert f.section_headers[0].name_index == 0
    assert f.section_headers[0].name is None


def test_64bit_values_above_double_precision():
    entry = 0xFFFFFFFF_FFFFF001
    vaddr = (1 << 53) + 1
    spec = _spec(
        elf_class=2,
        entry=entry,
        segments=[Seg(type=1, offset=0x200, vaddr=vaddr, filesz=8, memsz=8, flags=5, align=4)],
    )
    f = load_bytes(build_image(spec))
    assert f.entry == entry
    assert f.program_headers[0].vaddr == vaddr


def test_section_table_past_end_of_file_is_truncated():
    img = build_image(_spec())
    with pytest.raises(Truncated):
        load_bytes(img[: 0x400 + 40 * 2])


def test_program_table_past_end_of_file_is_truncated():
    img = build_image(_spec(shoff=0, sections=[], shstrndx=0, strtab_offset=0, phoff=0x100))
    with pytest.raises(Truncated):
        load_bytes(img[:0x110])


def test_string_table_without_terminator():
    spec = _spec()
    img = bytearray(build_image(spec))
    strtab, _ = build_strtab([s.name for s in spec.sections])
    last = spec.strtab_offset + len(strtab) - 1
    assert img[last] == 0
    img[last] = ord("X")
    with pytest.raises(MalformedTable):
        load_bytes(bytes(img))


def test_name_index_outside_string_table():
    img = bytearray(build_image(_spec()))
    # sh_name of section 1 (32-bit LSB) -> far beyond the table
    img[0x400 + 40 : 0x400 + 44] = (0x1000).to_bytes(4, "little")
    with pytest.raises(MalformedTable):
        load_bytes(bytes(img))


def test_shstrndx_out_of_range():
    img = bytearray(build_image(_spec()))
    img[50:52] = (9).to_bytes(2, "little")  # e_shstrndx
    with pytest.raises(MalformedTable):
        load_bytes(bytes(img))


def test_entry_size_smaller_than_record():
    spec = _spec(shentsize=16, total_size=0x600)
    with pytest.raises(MalformedTable):
        load_bytes(build_image(spec))


def test_string_at():
    table = b"\x00.text\x00.data\x00"
    assert string_at(table, 1) == ".text"
    assert string_at(table, 3) == "ext"
    assert string_at(table, 7) == ".data"
    with pytest.raises(MalformedTable):
        string_at(table, len(table))


def test_string_at_decodes_utf8_names():
    table = "\x00.daté\x00".encode("utf-8")
    assert string_at(table, 1) == ".daté"
    assert string_at(b"\x00.x\xff\x00", 1) == ".x�"
