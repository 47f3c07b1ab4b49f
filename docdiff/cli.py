"""CLI entry point: reads a diff, writes the JSON report, prints a summary."""

import argparse
import sys
from typing import List, Optional

from .config import load_config
from .engine import run_engine
from .errors import DocDiffReportError
from .report import empty_report, write_report
from .revisions import GitRevisionSource, NullRevisionSource
from .stats import DiffStats


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="docdiff",
        description="Report changed line ranges and doc-comment changes in a diff.",
    )
    parser.add_argument("diff_file", nargs="?", help="diff to read (default: stdin)")
    parser.add_argument(
        "-o", "--output", help="report path (default: changed-lines.json)"
    )
    parser.add_argument("--mode", choices=["docs", "hunks"])
    parser.add_argument("--no-git", action="store_true", help="do not query git")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _read_diff(path: Optional[str]) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    config = load_config()
    if args.mode:
        config.mode = args.mode
    if args.output:
        config.output = args.output
    if args.no_git:
        config.use_git = False
    if args.verbose:
        config.verbose = True

    exit_code = 0
    try:
        diff_text = _read_diff(args.diff_file)
    except OSError as exc:
        print(f"docdiff: cannot read diff: {exc}", file=sys.stderr)
        diff_text = ""
        exit_code = 1

    if not diff_text.strip():
        if exit_code == 0:
            print("docdiff: no diff provided; writing empty report", file=sys.stderr)
        report = empty_report()
    else:
        source = GitRevisionSource() if config.use_git else NullRevisionSource()
        report = run_engine(diff_text, config=config, source=source)

    try:
        write_report(report, config.output)
    except DocDiffReportError as exc:
        print(f"docdiff: {exc}", file=sys.stderr)
        sys.exit(1)

    stats = DiffStats.from_diff(diff_text)
    for line in stats.format_summary(report.changes, report.has_documentation_change):
        print(line)
    if exit_code:
        sys.exit(exit_code)
