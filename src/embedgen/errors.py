"""Exception types raised by embedgen.

Every failure is fatal to the current invocation. The CLI turns these into
a single diagnostic line and a non-zero exit status.
"""

from __future__ import annotations

from pathlib import Path


class EmbedgenError(Exception):
    """Base class. ``path`` names the file the failure is about."""

    def __init__(self, message: str, path: Path | str | None = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None

    def diagnostic(self) -> str:
        if self.path is None:
            return str(self)
        return f"{self.path}: {self}"


class SpliceIOError(EmbedgenError, OSError):
    """A file could not be opened, read, written, or renamed."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        temp_path: Path | str | None = None,
    ):
        super().__init__(message, path)
        self.temp_path = Path(temp_path) if temp_path is not None else None


class LedgerFormatError(EmbedgenError):
    """A ledger line does not parse as ``<line> <fragment-or-end>``."""

    def __init__(self, message: str, path: Path | str | None = None, lineno: int = 0):
        super().__init__(message, path)
        self.lineno = lineno

    def diagnostic(self) -> str:
        if self.path is None:
            return str(self)
        return f"{self.path}:{self.lineno}: {self}"


class ProtocolError(EmbedgenError):
    """The ledger is well-formed but cannot be spliced."""
