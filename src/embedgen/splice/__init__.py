"""Splice planning and host-file rewriting."""

from embedgen.splice.planner import InsertionPlan, load_replacement, plan_insertions
from embedgen.splice.rewriter import rewrite_host, run_formatter, splice_lines

__all__ = [
    "InsertionPlan",
    "load_replacement",
    "plan_insertions",
    "rewrite_host",
    "run_formatter",
    "splice_lines",
]
