"""Insertion ledger — persisted record of pending insertion points."""

from embedgen.ledger.models import LedgerEntry, Phase
from embedgen.ledger.store import Ledger, parse_line

__all__ = ["Ledger", "LedgerEntry", "Phase", "parse_line"]
