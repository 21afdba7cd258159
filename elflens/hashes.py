from __future__ import annotations

import hashlib
from pathlib import Path

_CHUNK = 1024 * 1024


def file_hashes(path: Path) -> tuple[str, str]:
    """(sha256, md5) hex digests of the file, read in 1 MiB chunks."""
    digests = (hashlib.sha256(), hashlib.md5())
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            for d in digests:
                d.update(chunk)
    return digests[0].hexdigest(), digests[1].hexdigest()
