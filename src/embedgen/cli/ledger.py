"""Ledger inspection and recovery CLI commands."""

import argparse

from embedgen.ledger.store import Ledger
from embedgen.paths import ledger_path


def _ledger(args: argparse.Namespace) -> Ledger:
    return Ledger(ledger_path(args.base, args.settings.ledger_name))


def cmd_status(args: argparse.Namespace) -> int:
    ledger = _ledger(args)
    state = ledger.state()
    if state is None:
        print("No pending insertions.")
        return 0

    entries = ledger.read_all()
    print(f"\n  Ledger: {ledger.path}")
    print(f"  Phase:  {state.value}")
    print(f"  {'─' * 40}")
    for entry in entries:
        if entry.is_sentinel:
            print(f"  {entry.line_number:>6}  (end)")
            continue
        present = "" if ledger.resolve(entry.fragment_ref).is_file() else "  MISSING"
        print(f"  {entry.line_number:>6}  {entry.fragment_ref}{present}")
    print(f"\n  {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")
    return 0


def cmd_splice(args: argparse.Namespace) -> int:
    from embedgen.session import splice_pending

    count = splice_pending(args.target, _ledger(args), args.settings)
    print(f"  Spliced {count} fragment(s) into {args.target}")
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    ledger = _ledger(args)
    removed = ledger.discard()
    if not removed:
        print("Nothing to clean.")
        return 0
    for p in removed:
        print(f"  removed {p}")
    return 0
