"""Turn ledger entries into concrete splice instructions.

For entries e[0..n-1] ending in the sentinel, plan i covers host lines
e[i].line_number through e[i+1].line_number - 1 (1-based, inclusive). That
range holds whatever an earlier run generated for e[i], however long it
was, so it is always removed before the new fragment goes in. An empty
range means pure insertion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from embedgen.errors import ProtocolError, SpliceIOError
from embedgen.ledger.models import LedgerEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsertionPlan:
    start_line: int
    delete_to_line: int
    replacement: str | None = None

    @property
    def deleted_count(self) -> int:
        return self.delete_to_line - self.start_line + 1


def load_replacement(path: Path | str) -> str:
    """Read a fragment file.

    Raises:
        ProtocolError: The ledger references a fragment that is gone.
        SpliceIOError: The fragment exists but cannot be read.
    """
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ProtocolError("ledger references a missing fragment file", p) from e
    except UnicodeDecodeError as e:
        raise SpliceIOError(f"fragment is not UTF-8 text: {e.reason}", p) from e
    except OSError as e:
        raise SpliceIOError(f"cannot read fragment: {e.strerror or e}", p) from e


def check_entries(entries: Sequence[LedgerEntry], source: Path | str | None = None) -> None:
    """Validate ledger shape before planning.

    Raises:
        ProtocolError: Empty ledger, sentinel missing or not last, or line
            numbers that go backwards.
    """
    if not entries:
        raise ProtocolError("ledger is empty", source)
    if not entries[-1].is_sentinel:
        raise ProtocolError("ledger does not end with the 'end' sentinel", source)
    for i, entry in enumerate(entries[:-1]):
        if entry.is_sentinel:
            raise ProtocolError(
                f"sentinel at entry {i + 1} is not the last entry", source,
            )
    for prev, cur in zip(entries, entries[1:]):
        if cur.line_number < prev.line_number:
            raise ProtocolError(
                f"line numbers decrease ({prev.line_number} then {cur.line_number})",
                source,
            )


def plan_insertions(
    entries: Sequence[LedgerEntry],
    read_fragment: Callable[[str], str | None] | None = None,
    source: Path | str | None = None,
) -> list[InsertionPlan]:
    """Compute one InsertionPlan per non-sentinel entry.

    Args:
        entries: Ledger entries in arrival order, sentinel last.
        read_fragment: Maps a fragment reference to its text. Defaults to
            reading the reference as a path.
        source: Ledger path, used in error messages.

    Returns:
        Plans in ledger order.
    """
    check_entries(entries, source)
    reader = read_fragment or load_replacement

    plans: list[InsertionPlan] = []
    for cur, nxt in zip(entries, entries[1:]):
        plans.append(InsertionPlan(
            start_line=cur.line_number,
            delete_to_line=nxt.line_number - 1,
            replacement=reader(cur.fragment_ref),
        ))
    logger.debug("planned %d insertion(s) from %s", len(plans), source or "<entries>")
    return plans
