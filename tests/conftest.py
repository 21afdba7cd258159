from __future__ import annotations

from pathlib import Path

import pytest

from elf_images import arm32_executable, sparc_executable, x86_64_executable


@pytest.fixture
def arm32_path(tmp_path: Path) -> Path:
    p = tmp_path / "membrane.elf"
    p.write_bytes(arm32_executable())
    return p


@pytest.fixture
def x86_64_path(tmp_path: Path) -> Path:
    p = tmp_path / "hello-x86_64"
    p.write_bytes(x86_64_executable())
    return p


@pytest.fixture
def sparc_path(tmp_path: Path) -> Path:
    p = tmp_path / "hello-sparc"
    p.write_bytes(sparc_executable())
    return p
