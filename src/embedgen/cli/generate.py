"""Build-hook and encode CLI commands."""

import argparse
import sys
from pathlib import Path


def cmd_generate(args: argparse.Namespace) -> int:
    from embedgen.session import read_targets, run_invocation

    target_file, target_line = read_targets(args.settings)
    result = run_invocation(
        args.input,
        target_file,
        target_line,
        settings=args.settings,
        base=args.base,
    )
    if args.verbose or result.spliced is not None:
        print(f"  {result.summary()}")
    return 0


def cmd_encode(args: argparse.Namespace) -> int:
    from embedgen.fragment.encoder import encode_file, write_fragment

    language = args.language or args.settings.language
    per_line = args.per_line or args.settings.values_per_line

    if args.output:
        dest = write_fragment(args.input, args.output, language, per_line)
        print(f"  Wrote {dest}")
        return 0

    sys.stdout.write(encode_file(Path(args.input), language, per_line))
    return 0
