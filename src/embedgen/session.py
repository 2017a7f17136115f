"""Two-phase insertion protocol across separate invocations.

Each build directive runs embedgen once. The phase is derived a single time
from what the invocation was given:

    input file given                    -> ENCODING
    no input, target file + line given  -> FINALIZING
    neither                             -> no-op

ENCODING renders the input and records its directive line. FINALIZING
records the sentinel and, unless splicing is deferred, splices every
recorded fragment into the target file. Between the two the ledger sits in
AWAITING_MORE.

The ledger records the directive lines themselves. With keep_directive (the
default) each region starts on the line below its directive and ends on the
line above the next one, so the directives survive every rewrite.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from embedgen.config import Settings
from embedgen.errors import ProtocolError
from embedgen.fragment.encoder import write_fragment
from embedgen.ledger.models import LedgerEntry, Phase
from embedgen.ledger.store import Ledger
from embedgen.paths import ledger_path, workdir
from embedgen.splice.planner import InsertionPlan, load_replacement, plan_insertions
from embedgen.splice.rewriter import rewrite_host

logger = logging.getLogger(__name__)


@dataclass
class InvocationResult:
    phase: Phase | None
    entry: LedgerEntry | None = None
    fragment: Path | None = None
    spliced: Path | None = None
    plans: int = 0

    def summary(self) -> str:
        if self.phase is None:
            return "nothing to do"
        if self.phase is Phase.ENCODING:
            if self.entry is None:
                return f"encoded {self.fragment} (no target, not recorded)"
            return f"encoded {self.fragment} for line {self.entry.line_number}"
        if self.spliced is None:
            return f"recorded end at line {self.entry.line_number}; splice deferred"
        return f"spliced {self.plans} fragment(s) into {self.spliced}"


def read_targets(
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> tuple[str | None, int | None]:
    """Read the target file and line from the environment.

    Raises:
        ProtocolError: The line variable is set but is not a line number.
    """
    env = os.environ if environ is None else environ
    target_file = env.get(settings.file_env) or None
    raw_line = env.get(settings.line_env) or None
    if raw_line is None:
        return target_file, None
    raw_line = raw_line.strip()
    if not (raw_line.isascii() and raw_line.isdigit()):
        raise ProtocolError(f"{settings.line_env}={raw_line!r} is not a line number")
    return target_file, int(raw_line)


def resolve_phase(
    input_path: Path | str | None,
    target_file: str | None,
    target_line: int | None,
) -> Phase | None:
    """Derive what this invocation does. None means no-op."""
    if input_path:
        return Phase.ENCODING
    if target_file and target_line is not None:
        return Phase.FINALIZING
    return None


def _below_directives(plans: list[InsertionPlan]) -> list[InsertionPlan]:
    return [replace(p, start_line=p.start_line + 1) for p in plans]


def _host_path(target_file: str, base: Path) -> Path:
    p = Path(target_file)
    return p if p.is_absolute() else base / p


def splice_pending(
    host_path: Path | str,
    ledger: Ledger,
    settings: Settings | None = None,
) -> int:
    """Splice a sentinel-terminated ledger into ``host_path``.

    The ledger and its fragments are removed only after the host file has
    been replaced. Returns the number of fragments inserted.

    Raises:
        ProtocolError: No ledger, or one not ending in the sentinel.
    """
    settings = settings or Settings()
    if not ledger.exists():
        raise ProtocolError("no pending ledger", ledger.path)

    entries = ledger.read_all()
    plans = plan_insertions(
        entries,
        read_fragment=lambda ref: load_replacement(ledger.resolve(ref)),
        source=ledger.path,
    )
    if settings.keep_directive:
        plans = _below_directives(plans)
    rewrite_host(host_path, plans, settings.formatter)
    ledger.drain()
    return len(plans)


def run_invocation(
    input_path: Path | str | None,
    target_file: str | None,
    target_line: int | None,
    settings: Settings | None = None,
    base: Path | None = None,
) -> InvocationResult:
    """Run one build-directive invocation.

    Args:
        input_path: File to embed, or None for the terminating call.
        target_file: Host source file named by the build driver.
        target_line: Line of the directive in the host file.
        settings: Loaded settings (defaults if omitted).
        base: Directory for ledger and fragments (default: workdir()).

    Returns:
        What was done.
    """
    settings = settings or Settings()
    base = base or workdir()
    phase = resolve_phase(input_path, target_file, target_line)
    if phase is None:
        logger.debug("no input and no target; nothing to do")
        return InvocationResult(phase=None)

    ledger = Ledger(ledger_path(base, settings.ledger_name))
    targeted = bool(target_file) and target_line is not None

    if phase is Phase.ENCODING:
        fragment = write_fragment(
            input_path,
            ledger.next_fragment_path(settings.fragment_pattern),
            language=settings.language,
            values_per_line=settings.values_per_line,
        )
        if not targeted:
            return InvocationResult(phase=phase, fragment=fragment)
        entry = ledger.append(target_line, fragment.name)
        return InvocationResult(phase=phase, entry=entry, fragment=fragment)

    entry = ledger.append_sentinel(target_line)
    if settings.defer_splice:
        logger.info("sentinel recorded at line %d; splice deferred", target_line)
        return InvocationResult(phase=phase, entry=entry)

    host = _host_path(target_file, base)
    count = splice_pending(host, ledger, settings)
    return InvocationResult(phase=phase, entry=entry, spliced=host, plans=count)
