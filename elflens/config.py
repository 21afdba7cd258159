from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel


class Limits(BaseModel):
    # Largest section/segment the CLI will dump
    max_dump_bytes: int = 64 * 1024 * 1024

    # Console tables are cut after this many rows
    max_table_rows: int = 512

    hex_preview_bytes: int = 256


class AppConfig(BaseModel):
    schema_version: str = "1.0"
    output_dir: str = "./out"
    limits: Limits = Limits()


def load_config(path: Optional[str]) -> AppConfig:
    if not path:
        return AppConfig()
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    return AppConfig.model_validate(data)


def config_to_snapshot(cfg: AppConfig) -> Dict[str, Any]:
    return cfg.model_dump()
