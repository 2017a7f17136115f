"""Ledger entry and session phase types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from embedgen import SENTINEL


class Phase(Enum):
    """Where a build cycle stands for one host file.

    ENCODING: this invocation renders a fragment and records it.
    AWAITING_MORE: entries are recorded, no sentinel yet.
    FINALIZING: the sentinel is recorded, the host file can be spliced.
    """

    ENCODING = "encoding"
    AWAITING_MORE = "awaiting-more"
    FINALIZING = "finalizing"


@dataclass(frozen=True)
class LedgerEntry:
    line_number: int
    fragment_ref: str

    @property
    def is_sentinel(self) -> bool:
        return self.fragment_ref == SENTINEL

    def to_line(self) -> str:
        return f"{self.line_number} {self.fragment_ref}\n"
