from __future__ import annotations

import logging
import sys

_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False, level: str | None = None) -> None:
    """Send embedgen log records to stderr.

    Stdout carries command output, so logs never go there. Default level is
    WARNING; ``verbose`` lowers it to DEBUG.
    """
    if level is None:
        level = "DEBUG" if verbose else "WARNING"

    root = logging.getLogger("embedgen")
    root.handlers.clear()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root.propagate = False

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
