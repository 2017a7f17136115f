"""Render an input file as a static byte-array declaration.

Output is always literal byte values, twelve per line by default:

    var logo_png = []byte{
    	0x89, 0x50, 0x4e, 0x47, ...
    }

Re-encoding the same input produces byte-identical text.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from embedgen.errors import SpliceIOError

logger = logging.getLogger(__name__)

_NON_IDENT = re.compile(r"[^A-Za-z0-9_]")

# language -> (opening line, value indent, closing line)
_STYLES = {
    "go": ("var {name} = []byte{{", "\t", "}}"),
    "c": ("static const unsigned char {name}[] = {{", "    ", "}};"),
}


def sanitize_identifier(name: str) -> str:
    """Turn a file name into a variable name.

    Only the base name is used. Characters outside ``[A-Za-z0-9_]`` become
    underscores; a leading digit gets an underscore prefix.
    """
    base = Path(name).name or "data"
    ident = _NON_IDENT.sub("_", base)
    if ident[0].isdigit():
        ident = "_" + ident
    return ident


def render_fragment(
    data: bytes,
    name: str,
    language: str = "go",
    values_per_line: int = 12,
) -> str:
    """Render bytes as a declaration named ``name``.

    Args:
        data: Raw bytes to embed.
        name: Variable name (used as given, see sanitize_identifier).
        language: Declaration style, "go" or "c".
        values_per_line: Byte values per output line.

    Returns:
        Declaration text ending in a newline.
    """
    if language not in _STYLES:
        raise ValueError(f"Unknown language '{language}' (valid: {', '.join(sorted(_STYLES))})")
    if values_per_line < 1:
        raise ValueError("values_per_line must be at least 1")

    opening, indent, closing = _STYLES[language]
    lines = [opening.format(name=name)]
    for start in range(0, len(data), values_per_line):
        chunk = data[start:start + values_per_line]
        lines.append(indent + " ".join(f"0x{b:02x}," for b in chunk))
    lines.append(closing.format())
    return "\n".join(lines) + "\n"


def encode_file(
    input_path: Path | str,
    language: str = "go",
    values_per_line: int = 12,
) -> str:
    """Read a whole file and render it as a fragment.

    Raises:
        SpliceIOError: If the input cannot be read.
    """
    src = Path(input_path)
    try:
        data = src.read_bytes()
    except OSError as e:
        raise SpliceIOError(f"cannot read input: {e.strerror or e}", src) from e

    logger.debug("encoding %s (%d bytes)", src, len(data))
    return render_fragment(data, sanitize_identifier(src.name), language, values_per_line)


def write_fragment(
    input_path: Path | str,
    fragment_path: Path | str,
    language: str = "go",
    values_per_line: int = 12,
) -> Path:
    """Encode ``input_path`` and write the result to ``fragment_path``."""
    text = encode_file(input_path, language, values_per_line)
    dest = Path(fragment_path)
    try:
        dest.write_text(text, encoding="utf-8")
    except OSError as e:
        raise SpliceIOError(f"cannot write fragment: {e.strerror or e}", dest) from e
    logger.info("wrote fragment %s", dest)
    return dest
