from __future__ import annotations

import io
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from elflens.errors import IOFailure, Truncated


class Reader:
    """
    Positioned reads against one open handle. Every read is checked against
    the known source size before it is issued, so an offset or size taken
    from a corrupt header surfaces as Truncated instead of a short read.
    """

    def __init__(self, fh: BinaryIO, size: int, name: str) -> None:
        self._fh = fh
        self.size = size
        self.name = name

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0 or size < 0 or offset + size > self.size:
            raise Truncated(
                f"{self.name}: read of {size} byte(s) at offset {offset} exceeds file size {self.size}",
                offset=offset,
                size=size,
                file_size=self.size,
            )
        try:
            self._fh.seek(offset)
            data = self._fh.read(size)
        except OSError as e:
            raise IOFailure(f"{self.name}: read failed at offset {offset}: {e}", offset=offset) from e
        if len(data) != size:
            raise Truncated(
                f"{self.name}: short read at offset {offset}: got {len(data)} of {size} byte(s)",
                offset=offset,
                size=size,
            )
        return data


class FileSource:
    """A file on disk, opened fresh for each `open()`."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.name = str(path)

    @contextmanager
    def open(self) -> Iterator[Reader]:
        try:
            fh = self.path.open("rb")
        except OSError as e:
            raise IOFailure(f"{self.name}: open failed: {e}", path=self.name) from e
        try:
            try:
                size = os.fstat(fh.fileno()).st_size
            except OSError as e:
                raise IOFailure(f"{self.name}: stat failed: {e}", path=self.name) from e
            yield Reader(fh, size, self.name)
        finally:
            fh.close()


class BytesSource:
    """An in-memory image; each `open()` gets its own cursor."""

    def __init__(self, data: bytes, name: str = "<memory>") -> None:
        self.data = bytes(data)
        self.name = name

    @contextmanager
    def open(self) -> Iterator[Reader]:
        fh = io.BytesIO(self.data)
        try:
            yield Reader(fh, len(self.data), self.name)
        finally:
            fh.close()
