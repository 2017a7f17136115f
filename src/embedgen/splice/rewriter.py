"""Apply insertion plans to a host source file.

The host is streamed line by line into a temporary file in the same
directory, which then replaces the original with os.replace(). Until that
rename the original is untouched; if the rename fails the temporary file is
left behind for inspection.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import warnings
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from embedgen import TEMP_PREFIX
from embedgen.errors import SpliceIOError
from embedgen.splice.planner import InsertionPlan

logger = logging.getLogger(__name__)


def _replacement_lines(text: str) -> list[bytes]:
    lines = text.encode("utf-8").splitlines(keepends=True)
    if lines and not lines[-1].endswith((b"\n", b"\r")):
        lines[-1] += b"\n"
    return lines


def splice_lines(lines: Iterable[bytes], plans: Sequence[InsertionPlan]) -> Iterator[bytes]:
    """Yield the host's lines with every plan applied.

    Line numbers are 1-based. Host lines are raw bytes, copied untouched;
    generated lines are UTF-8 and always end in a newline.
    """
    source = iter(lines)
    lnum = 0
    last_out = b"\n"

    def take() -> bytes | None:
        nonlocal lnum
        line = next(source, None)
        if line is not None:
            lnum += 1
        return line

    for plan in plans:
        # copy up to, not including, start_line
        while lnum + 1 < plan.start_line:
            line = take()
            if line is None:
                break
            last_out = line
            yield line

        # drop the previous fragment
        while lnum < plan.delete_to_line:
            if take() is None:
                break

        if plan.replacement:
            if not last_out.endswith((b"\n", b"\r")):
                yield b"\n"
            for line in _replacement_lines(plan.replacement):
                last_out = line
                yield line

    for line in source:
        yield line


def run_formatter(command: Sequence[str], path: Path | str) -> bool:
    """Run a source formatter over ``path`` in place. Best effort.

    Returns:
        True if the formatter ran and exited 0. Failures only warn.
    """
    if not command:
        return False
    try:
        result = subprocess.run(
            [*command, str(path)],
            capture_output=True,
            text=True,
        )
    except OSError as e:
        warnings.warn(f"formatter {command[0]!r} could not run: {e}")
        return False
    if result.returncode != 0:
        warnings.warn(
            f"formatter {command[0]!r} exited {result.returncode}: {result.stderr.strip()}"
        )
        return False
    return True


def rewrite_host(
    host_path: Path | str,
    plans: Sequence[InsertionPlan],
    formatter: Sequence[str] | None = None,
) -> Path:
    """Rewrite ``host_path`` with ``plans`` applied, replacing it atomically.

    Args:
        host_path: Source file to rewrite.
        plans: Insertion plans in ledger order.
        formatter: Optional formatter command, run on the rewritten
            temporary file before it replaces the host.

    Returns:
        The host path.

    Raises:
        SpliceIOError: The host cannot be read, the temporary file cannot
            be written, or the final rename fails. In the last case
            ``temp_path`` names the fully written temporary file.
    """
    host = Path(host_path)
    try:
        src = open(host, "rb")
    except OSError as e:
        raise SpliceIOError(f"cannot open host file: {e.strerror or e}", host) from e

    with src:
        try:
            tmp = tempfile.NamedTemporaryFile(
                "wb",
                dir=host.parent,
                prefix=TEMP_PREFIX,
                suffix=host.suffix,
                delete=False,
            )
        except OSError as e:
            raise SpliceIOError(f"cannot create temporary file: {e.strerror or e}", host) from e

        tmp_path = Path(tmp.name)
        try:
            with tmp:
                tmp.writelines(splice_lines(src, plans))
        except (OSError, UnicodeError) as e:
            tmp_path.unlink(missing_ok=True)
            raise SpliceIOError(
                f"rewrite failed: {getattr(e, 'strerror', None) or e}", host,
            ) from e

    try:
        shutil.copymode(host, tmp_path)
    except OSError:
        logger.debug("could not copy permissions of %s", host)

    if formatter:
        run_formatter(formatter, tmp_path)

    try:
        os.replace(tmp_path, host)
    except OSError as e:
        raise SpliceIOError(
            f"cannot replace host file: {e.strerror or e}", host, temp_path=tmp_path,
        ) from e

    logger.info("rewrote %s (%d insertion(s))", host, len(plans))
    return host
