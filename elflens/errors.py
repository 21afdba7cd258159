from __future__ import annotations

from typing import Any, Dict


class ElfError(Exception):
    """
    Base class for decode failures. Each subclass carries a stable error
    code so failures can be recorded as structured error objects.
    """

    code = "E_ELF"

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def as_dict(self) -> Dict[str, Any]:
        d = {"code": self.code, "message": self.message}
        d.update(self.extra)
        return d


class IOFailure(ElfError):
    code = "E_ELF_IO"


class BadMagic(ElfError):
    code = "E_ELF_BAD_MAGIC"


class UnsupportedCapacity(ElfError):
    code = "E_ELF_UNSUPPORTED_CLASS"


class Truncated(ElfError):
    code = "E_ELF_TRUNCATED"


class MalformedTable(ElfError):
    code = "E_ELF_MALFORMED_TABLE"


class NotFound(ElfError):
    code = "E_ELF_NOT_FOUND"
