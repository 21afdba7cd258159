from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Dict, List

SECTION_COLUMNS = [
    "index",
    "name",
    "type",
    "type_name",
    "flags",
    "addr",
    "offset",
    "size",
    "link",
    "info",
    "addralign",
    "entsize",
]


def _cell(v: Any) -> Any:
    if v is None:
        return ""
    return v


def write_sections_csv(path: Path, report: Dict[str, Any]) -> None:
    """One row per section header, in file order."""
    sections: List[Dict[str, Any]] = report.get("sections", []) if isinstance(report, dict) else []

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=SECTION_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for s in sections:
            writer.writerow({k: _cell(s.get(k)) for k in SECTION_COLUMNS})
