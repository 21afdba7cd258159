from __future__ import annotations
from rich.console import Console
from rich.table import Table
from pathlib import Path
from typing import Dict, Any, Optional

console = Console()


def _hex(v: Any) -> str:
    return f"0x{int(v):x}" if v is not None else ""


def _label(name: Optional[str], value: int) -> str:
    return f"{name} ({value})" if name else str(value)


def render_header(report: Dict[str, Any]) -> None:
    s = report.get("summary", {})
    inp = report.get("input", {})
    t = Table(title="ELF Header")
    t.add_column("Field")
    t.add_column("Value", overflow="fold")
    t.add_row("input", str(inp.get("input_path", "")))
    t.add_row("sha256", str(inp.get("sha256", "")))
    t.add_row("class", _label(s.get("capacity_name"), s.get("capacity", 0)))
    t.add_row("data", _label(s.get("encoding_name"), s.get("encoding", 0)))
    t.add_row("type", _label(s.get("type_name"), s.get("type", 0)))
    t.add_row("machine", _label(s.get("machine_name"), s.get("machine", 0)))
    t.add_row("version", str(s.get("version", "")))
    t.add_row("entry", _hex(s.get("entry")))
    t.add_row("phoff", str(s.get("phoff", "")))
    t.add_row("shoff", str(s.get("shoff", "")))
    t.add_row("flags", _hex(s.get("flags")))
    t.add_row("ehsize", str(s.get("ehsize", "")))
    t.add_row("phentsize / phnum", f"{s.get('phentsize', '')} / {s.get('phnum', '')}")
    t.add_row("shentsize / shnum", f"{s.get('shentsize', '')} / {s.get('shnum', '')}")
    t.add_row("shstrndx", str(s.get("shstrndx", "")))
    console.print(t)


def render_sections(report: Dict[str, Any], *, max_rows: int = 512) -> None:
    sections = report.get("sections", [])
    t = Table(title=f"Section Headers ({len(sections)})")
    for col in ("Nr", "Name", "Type", "Addr", "Off", "Size", "ES", "Flg", "Lk", "Inf", "Al"):
        t.add_column(col)
    for s in sections[:max_rows]:
        t.add_row(
            str(s["index"]),
            s.get("name") or "",
            s.get("type_name") or _hex(s["type"]),
            _hex(s["addr"]),
            _hex(s["offset"]),
            _hex(s["size"]),
            _hex(s["entsize"]),
            _hex(s["flags"]),
            str(s["link"]),
            str(s["info"]),
            str(s["addralign"]),
        )
    console.print(t)
    if len(sections) > max_rows:
        console.print(f"[yellow]... {len(sections) - max_rows} more section(s) not shown[/yellow]")


def render_segments(report: Dict[str, Any], *, max_rows: int = 512) -> None:
    segments = report.get("segments", [])
    t = Table(title=f"Program Headers ({len(segments)})")
    for col in ("Type", "Offset", "VirtAddr", "PhysAddr", "FileSiz", "MemSiz", "Flg", "Align"):
        t.add_column(col)
    for p in segments[:max_rows]:
        t.add_row(
            p.get("type_name") or _hex(p["type"]),
            _hex(p["offset"]),
            _hex(p["vaddr"]),
            _hex(p["paddr"]),
            _hex(p["filesz"]),
            _hex(p["memsz"]),
            p.get("flags_text", ""),
            _hex(p["align"]),
        )
    console.print(t)
    if len(segments) > max_rows:
        console.print(f"[yellow]... {len(segments) - max_rows} more segment(s) not shown[/yellow]")


def render_console(report: Dict[str, Any], report_dir: Optional[Path] = None, *, max_rows: int = 512) -> None:
    render_header(report)
    render_sections(report, max_rows=max_rows)
    render_segments(report, max_rows=max_rows)
    if report_dir is not None:
        console.print(f"[green]Report written:[/green] {report_dir}")


def render_hex_preview(data: bytes, *, limit: int = 256) -> None:
    shown = data[:limit]
    for off in range(0, len(shown), 16):
        row = shown[off : off + 16]
        hexpart = " ".join(f"{b:02x}" for b in row)
        text = "".join(chr(b) if 32 <= b < 127 else "." for b in row)
        console.print(f"{off:08x}  {hexpart:<47}  {text}", markup=False, highlight=False)
    if len(data) > limit:
        console.print(f"[dim]... {len(data) - limit} more byte(s)[/dim]")
