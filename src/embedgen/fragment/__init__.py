"""Fragment encoder — render file bytes as a source-level byte array."""

from embedgen.fragment.encoder import (
    encode_file,
    render_fragment,
    sanitize_identifier,
    write_fragment,
)

__all__ = [
    "encode_file",
    "render_fragment",
    "sanitize_identifier",
    "write_fragment",
]
