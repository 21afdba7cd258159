import csv
from datetime import datetime
from pathlib import Path

from elflens.elf import load
from elflens.model import InputEvidence, Report
from elflens.reporters.csv_report import write_sections_csv


def _evidence(p: Path) -> InputEvidence:
    return InputEvidence(input_path=str(p), file_size=p.stat().st_size, sha256="0" * 64, md5="0" * 32)


def test_report_from_elf(x86_64_path: Path):
    r = Report.from_elf(load(x86_64_path), _evidence(x86_64_path), report_id="test")

    assert r.timestamp_utc.endswith("Z")
    datetime.fromisoformat(r.timestamp_utc.replace("Z", "+00:00"))
    assert r.summary.capacity_name == "CLASS64"
    assert r.summary.encoding_name == "LSB"
    assert r.summary.type_name == "EXECUTABLE"
    assert r.summary.machine_name == "X86_64"
    assert len(r.sections) == 30
    assert r.sections[27].name == ".shstrtab"
    assert r.sections[27].type_name == "SHT_STRTAB"
    assert r.segments[1].type_name == "PT_INTERP"
    assert r.segments[3].flags_text == "R E"


def test_report_round_trip_validation(arm32_path: Path):
    r = Report.from_elf(load(arm32_path), _evidence(arm32_path), report_id="rt")

    r2 = Report.model_validate_json(r.model_dump_json())
    assert r2.summary.entry == 2130706433
    assert r2.summary.machine_name == "ARM"
    assert r2.segments[2].type_name is None
    assert r2.sections[0].name is None


def test_sections_csv(tmp_path: Path, sparc_path: Path):
    report = Report.from_elf(load(sparc_path), _evidence(sparc_path), report_id="csv").model_dump()
    out = tmp_path / "sections.csv"
    write_sections_csv(out, report)

    with out.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == len(report["sections"])
    assert rows[0]["name"] == ""
    assert rows[33]["name"] == ".shstrtab"
    assert rows[33]["offset"] == "180668"
    assert rows[33]["size"] == "289"
