"""The ledger file: append across invocations, drain once at splice time.

One entry per line, ``<line-number> <fragment-file-or-end>``. Entries keep
arrival order. The ledger owns its own lifecycle: it is created by the first
append and removed, together with every fragment it references, by drain()
or discard().

No locking is done. The build driver runs invocations one at a time.
"""

from __future__ import annotations

import logging
from pathlib import Path

from embedgen import SENTINEL
from embedgen.errors import LedgerFormatError, SpliceIOError
from embedgen.ledger.models import LedgerEntry, Phase

logger = logging.getLogger(__name__)


def parse_line(text: str, path: Path | str | None = None, lineno: int = 0) -> LedgerEntry:
    """Parse one ledger line into a LedgerEntry.

    Raises:
        LedgerFormatError: Wrong token count or a bad line number.
    """
    tokens = text.split()
    if len(tokens) != 2:
        raise LedgerFormatError(
            f"expected '<line> <fragment>', got {len(tokens)} token(s)", path, lineno,
        )
    raw_line, ref = tokens
    if not (raw_line.isascii() and raw_line.isdigit()):
        raise LedgerFormatError(f"bad line number '{raw_line}'", path, lineno)
    return LedgerEntry(int(raw_line), ref)


class Ledger:
    """Persisted mailbox of pending insertions for one build cycle."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"Ledger({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def append(self, line_number: int, fragment_ref: str) -> LedgerEntry:
        """Record an insertion point, creating the ledger if absent."""
        if line_number < 0:
            raise ValueError(f"line number must be non-negative, got {line_number}")
        if not fragment_ref or any(c.isspace() for c in fragment_ref):
            raise ValueError(f"fragment reference must be a single token, got {fragment_ref!r}")

        entry = LedgerEntry(line_number, fragment_ref)
        try:
            with open(self.path, "a") as f:
                f.write(entry.to_line())
        except OSError as e:
            raise SpliceIOError(f"cannot append to ledger: {e.strerror or e}", self.path) from e
        logger.debug("ledger %s: appended %s", self.path, entry)
        return entry

    def append_sentinel(self, line_number: int) -> LedgerEntry:
        """Record the terminal entry for the current host file."""
        return self.append(line_number, SENTINEL)

    def read_all(self) -> list[LedgerEntry]:
        """Parse every entry in arrival order. A missing ledger is empty."""
        if not self.exists():
            return []
        try:
            with open(self.path) as f:
                lines = f.readlines()
        except OSError as e:
            raise SpliceIOError(f"cannot read ledger: {e.strerror or e}", self.path) from e

        entries: list[LedgerEntry] = []
        for lineno, text in enumerate(lines, start=1):
            entries.append(parse_line(text, self.path, lineno))
        return entries

    def state(self) -> Phase | None:
        """AWAITING_MORE until the sentinel is last, then FINALIZING."""
        entries = self.read_all()
        if not entries:
            return None
        if entries[-1].is_sentinel:
            return Phase.FINALIZING
        return Phase.AWAITING_MORE

    def next_fragment_path(self, pattern: str) -> Path:
        """Fragment file for the next entry, unique within this cycle."""
        index = len(self.read_all())
        return self.path.parent / pattern.format(index=index)

    def resolve(self, fragment_ref: str) -> Path:
        """Fragment references are relative to the ledger's directory."""
        return self.path.parent / fragment_ref

    def fragment_paths(self, entries: list[LedgerEntry] | None = None) -> list[Path]:
        if entries is None:
            entries = self.read_all()
        seen: list[Path] = []
        for entry in entries:
            if entry.is_sentinel:
                continue
            p = self.resolve(entry.fragment_ref)
            if p not in seen:
                seen.append(p)
        return seen

    def drain(self) -> list[LedgerEntry]:
        """Read every entry, then delete the ledger and its fragments.

        Fragment contents are not read here. Callers that need them must
        load them before draining (see session.splice_pending).
        """
        entries = self.read_all()
        self._remove(entries)
        return entries

    def discard(self) -> list[Path]:
        """Throw away a stale cycle without splicing. Returns removed paths.

        A ledger that no longer parses is still removed.
        """
        try:
            entries = self.read_all()
        except LedgerFormatError:
            logger.warning("ledger %s is malformed; removing without fragments", self.path)
            entries = []
        return self._remove(entries)

    def _remove(self, entries: list[LedgerEntry]) -> list[Path]:
        removed: list[Path] = []
        for p in [*self.fragment_paths(entries), self.path]:
            try:
                p.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise SpliceIOError(f"cannot remove: {e.strerror or e}", p) from e
            removed.append(p)
        logger.debug("removed %s", ", ".join(str(p) for p in removed) or "nothing")
        return removed
