"""Working-directory path resolution.

Resolves where the ledger, fragments, and settings file live. Uses
environment variables when available, falls back to the current directory.

Environment variables:
    EMBEDGEN_WORKDIR — directory holding ledger and fragments (default: cwd)
    EMBEDGEN_CONFIG — settings file (default: <workdir>/embedgen.yaml)
"""

from __future__ import annotations

import os
from pathlib import Path

from embedgen import DEFAULT_CONFIG_NAME, DEFAULT_LEDGER_NAME


def workdir() -> Path:
    """Return the directory that holds per-cycle state."""
    env = os.environ.get("EMBEDGEN_WORKDIR")
    if env:
        return Path(env).expanduser()
    return Path.cwd()


def config_path(base: Path | None = None) -> Path:
    """Return the path to the settings file (which may not exist)."""
    env = os.environ.get("EMBEDGEN_CONFIG")
    if env:
        return Path(env).expanduser()
    return (base or workdir()) / DEFAULT_CONFIG_NAME


def ledger_path(base: Path | None = None, name: str = DEFAULT_LEDGER_NAME) -> Path:
    """Return the path to the insertion ledger."""
    return (base or workdir()) / name
