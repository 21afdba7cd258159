from __future__ import annotations

import logging
import uuid
from importlib import metadata
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler

from elflens.config import AppConfig, config_to_snapshot, load_config
from elflens.constants import parse_segment_type
from elflens.elf import ElfFile, load
from elflens.errors import ElfError, NotFound
from elflens.hashes import file_hashes
from elflens.model import InputEvidence, Report
from elflens.reporters.console import render_console, render_hex_preview
from elflens.reporters.csv_report import write_sections_csv
from elflens.reporters.json_report import write_json

app = typer.Typer(add_completion=False)

EXIT_DECODE_ERROR = 1
EXIT_NOT_FOUND = 2


def tool_version() -> str:
    try:
        return metadata.version("elflens")
    except metadata.PackageNotFoundError:
        return "0.1.0-dev"


def version_callback(value: bool):
    if value:
        typer.echo(f"elflens version: {tool_version()}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=False)],
        force=True,
    )


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version and exit."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each decoding stage."),
):
    """
    Read-only ELF decoder: headers, section and program tables, raw content.
    """
    _configure_logging(verbose)


def _exit_for(e: ElfError) -> typer.Exit:
    typer.secho(f"Error: {type(e).__name__}: {e}", fg=typer.colors.RED, err=True)
    return typer.Exit(EXIT_NOT_FOUND if isinstance(e, NotFound) else EXIT_DECODE_ERROR)


def _resolve_input(path: str) -> Path:
    p = Path(path).expanduser().resolve()
    if not p.is_file():
        raise typer.BadParameter(f"Not a file: {p}")
    return p


def _load_or_exit(p: Path) -> ElfFile:
    try:
        return load(p)
    except ElfError as e:
        raise _exit_for(e)


def _check_dump_size(size: int, cfg: AppConfig, what: str) -> None:
    if size > cfg.limits.max_dump_bytes:
        typer.secho(
            f"Refusing to dump {what}: {size} bytes exceeds limits.max_dump_bytes={cfg.limits.max_dump_bytes}",
            fg=typer.colors.YELLOW,
            err=True,
        )
        raise typer.Exit(EXIT_DECODE_ERROR)


def _emit(data: bytes, out: Optional[str], cfg: AppConfig, what: str) -> None:
    if out:
        dest = Path(out).expanduser()
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        typer.echo(f"Wrote {len(data)} bytes of {what} -> {dest}")
    else:
        typer.echo(f"{what}: {len(data)} bytes")
        render_hex_preview(data, limit=cfg.limits.hex_preview_bytes)


def build_report(p: Path, elf: ElfFile, cfg: AppConfig) -> Report:
    sha256, md5 = file_hashes(p)
    evidence = InputEvidence(input_path=str(p), file_size=p.stat().st_size, sha256=sha256, md5=md5)
    return Report.from_elf(
        elf,
        evidence,
        report_id=str(uuid.uuid4()),
        schema_version=cfg.schema_version,
        tool={"name": "elflens", "version": tool_version()},
        config=config_to_snapshot(cfg),
    )


@app.command()
def info(
    path: str = typer.Argument(..., help="ELF file to decode."),
    config: str = typer.Option(None, "--config", help="Path to YAML config."),
    outdir: str = typer.Option(None, "--outdir", help="Write report.json and sections.csv here (default: output_dir from config)."),
):
    """Show the ELF header, section headers and program headers."""
    cfg = load_config(config)
    p = _resolve_input(path)
    elf = _load_or_exit(p)

    report = build_report(p, elf, cfg).model_dump()

    base = Path(outdir or cfg.output_dir).expanduser().resolve()
    report_dir = base / f"elflens_{report['report_id']}"
    write_json(report_dir / "report.json", report)
    write_sections_csv(report_dir / "sections.csv", report)

    render_console(report, report_dir, max_rows=cfg.limits.max_table_rows)


@app.command()
def section(
    path: str = typer.Argument(..., help="ELF file to read."),
    name: str = typer.Argument(..., help="Section name, e.g. .text"),
    out: str = typer.Option(None, "--out", "-o", help="Write raw bytes to this file."),
    config: str = typer.Option(None, "--config", help="Path to YAML config."),
):
    """Dump the raw bytes of a section, looked up by name."""
    cfg = load_config(config)
    elf = _load_or_exit(_resolve_input(path))
    sh = elf.find_section(name)
    if sh is None:
        raise _exit_for(NotFound(f"No section named {name!r}", section=name))
    _check_dump_size(sh.size, cfg, f"section {name}")
    try:
        data = elf.read_section(name)
    except ElfError as e:
        raise _exit_for(e)
    _emit(data, out, cfg, f"section {name}")


@app.command()
def segment(
    path: str = typer.Argument(..., help="ELF file to read."),
    segment_type: str = typer.Argument(..., metavar="TYPE", help="p_type as a number (0x7000f001) or a name (LOAD, PT_NOTE)."),
    out: str = typer.Option(None, "--out", "-o", help="Write raw bytes to this file."),
    config: str = typer.Option(None, "--config", help="Path to YAML config."),
):
    """Dump the raw file bytes of the first segment of the given type."""
    try:
        ptype = parse_segment_type(segment_type)
    except ValueError as e:
        raise typer.BadParameter(str(e))

    cfg = load_config(config)
    elf = _load_or_exit(_resolve_input(path))
    ph = elf.find_segment(ptype)
    if ph is None:
        raise _exit_for(NotFound(f"No segment of type 0x{ptype:x}", segment_type=ptype))
    _check_dump_size(ph.filesz, cfg, f"segment 0x{ptype:x}")
    try:
        data = elf.read_segment(ptype)
    except ElfError as e:
        raise _exit_for(e)
    _emit(data, out, cfg, f"segment 0x{ptype:x}")


if __name__ == "__main__":
    app()
