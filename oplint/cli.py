"""
Command-line entry point.

    oplint [paths ...] [--missing] [--package NAME] [--json] [-v]

Text diagnostics go to stderr as `file:line:col: severity: message`; `--json`
prints a single `{"exit_code": N, "diagnostics": [...]}` object to stdout.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from .analyzer import Config, analyze_paths, collect_files
from .diagnostics import diagnostic_to_json, format_diagnostic


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog="oplint", description="Check Go op constants against function names")
    ap.add_argument("paths", nargs="*", default=["."], help="files or directories to check (default: .)")
    ap.add_argument(
        "--missing",
        action="store_true",
        help="also report functions which have an error return but no op constant defined",
    )
    ap.add_argument("--package", metavar="NAME", help="package name to use instead of each file's package clause")
    ap.add_argument("--json", action="store_true", help="emit diagnostics as JSON on stdout")
    ap.add_argument("-v", "--verbose", action="store_true", help="report clean files as well")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    config = Config(report_missing=args.missing, package=args.package)

    files = collect_files(args.paths)
    if not files:
        if args.json:
            print(json.dumps({"exit_code": 1, "diagnostics": [], "error": "no .go files found"}))
        else:
            print("oplint: no .go files found", file=sys.stderr)
        return 1

    diags = analyze_paths(files, config)
    exit_code = 1 if diags else 0

    if args.json:
        payload = {
            "exit_code": exit_code,
            "diagnostics": [diagnostic_to_json(d) for d in diags],
        }
        print(json.dumps(payload))
        return exit_code

    for d in diags:
        print(format_diagnostic(d), file=sys.stderr)
    if args.verbose:
        flagged = {d.span.file for d in diags}
        for path in files:
            if str(path) not in flagged:
                print(f"[ok] {path}", file=sys.stderr)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
