"""Command-line interface for embedgen.

Usage:
    embedgen generate [INPUT]
    embedgen encode INPUT [--output FILE] [--language go|c] [--per-line N]
    embedgen splice --target FILE
    embedgen status
    embedgen clean

``generate`` is the build hook. It reads the target file and line from the
environment (GOFILE / GOLINE by default), e.g. from a Go directive:

    //go:generate embedgen generate logo.png
    //go:generate embedgen generate
"""

import argparse
import sys
from pathlib import Path

import yaml

from embedgen import __version__
from embedgen.cli.generate import cmd_encode, cmd_generate
from embedgen.cli.ledger import cmd_clean, cmd_splice, cmd_status
from embedgen.config import VALID_LANGUAGES, load_settings
from embedgen.errors import EmbedgenError
from embedgen.logging_config import configure_logging
from embedgen.paths import config_path, workdir


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="embedgen",
        description="Embed file bytes into generated source at recorded lines",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log progress to stderr",
    )
    parser.add_argument(
        "--workdir", default=None,
        help="Directory holding the ledger and fragments (default: cwd)",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to embedgen.yaml",
    )
    sub = parser.add_subparsers(dest="command")

    gen = sub.add_parser(
        "generate", help="Build hook: record a fragment or finish the file",
    )
    gen.add_argument(
        "input", nargs="?", default=None,
        help="File to embed (omit for the terminating call)",
    )

    enc = sub.add_parser("encode", help="Render a file as a byte-array declaration")
    enc.add_argument("input")
    enc.add_argument("-o", "--output", default=None, help="Write to file instead of stdout")
    enc.add_argument(
        "--language", choices=sorted(VALID_LANGUAGES), default=None,
        help="Declaration style (default from settings)",
    )
    enc.add_argument(
        "--per-line", type=int, default=None,
        help="Byte values per line (default from settings)",
    )

    spl = sub.add_parser("splice", help="Apply a deferred, terminated ledger")
    spl.add_argument("--target", required=True, help="Host source file to rewrite")

    sub.add_parser("status", help="Show pending ledger entries")
    sub.add_parser("clean", help="Discard a stale ledger and its fragments")

    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args.verbose)

    dispatch = {
        "generate": cmd_generate,
        "encode": cmd_encode,
        "splice": cmd_splice,
        "status": cmd_status,
        "clean": cmd_clean,
    }

    try:
        args.base = Path(args.workdir).expanduser() if args.workdir else workdir()
        if args.config and not Path(args.config).is_file():
            raise EmbedgenError("settings file not found", args.config)
        args.settings = load_settings(args.config or config_path(args.base))
        return dispatch[args.command](args)
    except EmbedgenError as e:
        print(f"embedgen: {e.diagnostic()}", file=sys.stderr)
        return 1
    except (ValueError, yaml.YAMLError) as e:
        print(f"embedgen: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
