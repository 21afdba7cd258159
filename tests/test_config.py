from pathlib import Path

import pytest
from pydantic import ValidationError

from elflens.config import AppConfig, config_to_snapshot, load_config


def test_defaults_without_path():
    cfg = load_config(None)
    assert isinstance(cfg, AppConfig)
    assert cfg.output_dir == "./out"
    assert cfg.limits.max_dump_bytes == 64 * 1024 * 1024


def test_yaml_overrides(tmp_path: Path):
    p = tmp_path / "cfg.yaml"
    p.write_text("output_dir: /tmp/elf\nlimits:\n  max_dump_bytes: 10\n", encoding="utf-8")
    cfg = load_config(str(p))
    assert cfg.output_dir == "/tmp/elf"
    assert cfg.limits.max_dump_bytes == 10
    assert cfg.limits.max_table_rows == 512
    assert config_to_snapshot(cfg)["limits"]["max_dump_bytes"] == 10


def test_empty_yaml_gives_defaults(tmp_path: Path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_config(str(p)) == AppConfig()


def test_invalid_yaml_value(tmp_path: Path):
    p = tmp_path / "bad.yaml"
    p.write_text("limits:\n  max_dump_bytes: lots\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(str(p))
